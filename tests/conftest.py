# tests/conftest.py

import pytest
from fastapi.testclient import TestClient
from blogserver.config import Settings
from blogserver.core.images import UploadResult
from blogserver.main import create_app


HOSTED_URL = "https://res.cloudinary.com/demo/image/upload/blog_images/hosted.jpg"


class FakeUploader:
    """Stands in for the Cloudinary uploader and records every call."""

    def __init__(self, result: UploadResult | None = None):
        self.result = result or UploadResult(ok=True, url=HOSTED_URL)
        self.calls = []

    async def upload(self, data: bytes, name: str) -> UploadResult:
        self.calls.append((data, name))
        return self.result


@pytest.fixture
def settings(tmp_path):
    return Settings(
        jwt_secret="test-jwt-secret",
        session_secret="test-session-secret",
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        db_timeout_sec=10,
        bcrypt_rounds=4,
    )


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def app(settings, uploader):
    return create_app(settings, uploader=uploader)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def hasher(app):
    return app.state.hasher


@pytest.fixture
def login_as(client):
    """Signs a user up and logs them in on the shared client."""

    def _login(username="alice", password="s3cret"):
        client.post("/signup", data={"username": username, "password": password}, follow_redirects=False)
        response = client.post("/login", data={"username": username, "password": password}, follow_redirects=False)
        assert response.status_code == 303
        return response

    return _login
