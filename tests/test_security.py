# tests/test_security.py

import threading
from datetime import timedelta
import pytest
from blogserver.core.errors import DuplicateUsername, InvalidCredentials, InvalidToken
from blogserver.core.security import (
    authenticate_user,
    create_access_token,
    decode_access_token,
    issue_token_for,
    register_user,
)
from blogserver.models.user import User


SECRET = "unit-test-secret"


def test_register_hashes_password(db, hasher):
    user = register_user(db, hasher, "alice", "s3cret")

    assert user.id is not None
    assert user.hashed_password != "s3cret"
    assert user.hashed_password.startswith("$2")
    assert user.created_at is not None


def test_register_duplicate_username(db, hasher):
    register_user(db, hasher, "alice", "s3cret")

    with pytest.raises(DuplicateUsername):
        register_user(db, hasher, "alice", "another")

    assert db.query(User).filter_by(username="alice").count() == 1


def test_usernames_are_exact_match(db, hasher):
    register_user(db, hasher, "alice", "s3cret")
    register_user(db, hasher, "Alice", "s3cret")

    assert db.query(User).count() == 2


def test_authenticate_with_matching_password(db, hasher):
    register_user(db, hasher, "alice", "s3cret")

    user = authenticate_user(db, hasher, "alice", "s3cret")
    assert user.username == "alice"


@pytest.mark.parametrize("username, password", [
    ("alice", "wrong"),
    ("alice", ""),
    ("alice", "S3CRET"),
    ("nobody", "s3cret"),
])
def test_authenticate_failures_look_the_same(db, hasher, username, password):
    register_user(db, hasher, "alice", "s3cret")

    with pytest.raises(InvalidCredentials) as exc:
        authenticate_user(db, hasher, username, password)
    assert exc.value.message == "Invalid credentials"


def test_concurrent_signup_creates_one_user(app, hasher):
    workers = 6
    barrier = threading.Barrier(workers)
    outcomes = []
    lock = threading.Lock()

    def signup():
        db = app.state.session_factory()
        try:
            barrier.wait()
            try:
                register_user(db, hasher, "racer", "pw")
                result = "created"
            except DuplicateUsername:
                result = "duplicate"
        finally:
            db.close()
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=signup) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("created") == 1
    assert outcomes.count("duplicate") == workers - 1

    db = app.state.session_factory()
    try:
        assert db.query(User).filter_by(username="racer").count() == 1
    finally:
        db.close()


# -------------------------------
# Tokens
# -------------------------------

def test_token_carries_claims_and_seven_day_expiry():
    token = create_access_token({"sub": "alice", "id": 7}, SECRET)
    payload = decode_access_token(token, SECRET)

    assert payload["sub"] == "alice"
    assert payload["id"] == 7
    assert payload["exp"] - payload["iat"] == int(timedelta(days=7).total_seconds())


def test_issue_token_for_user(db, hasher):
    user = register_user(db, hasher, "alice", "s3cret")
    payload = decode_access_token(issue_token_for(user, SECRET), SECRET)

    assert payload["sub"] == "alice"
    assert payload["id"] == user.id


def test_expired_token_rejected():
    token = create_access_token({"sub": "alice"}, SECRET, expires_delta=timedelta(seconds=-10))

    with pytest.raises(InvalidToken):
        decode_access_token(token, SECRET)


def test_token_signed_with_other_secret_rejected():
    token = create_access_token({"sub": "alice"}, "other-secret")

    with pytest.raises(InvalidToken):
        decode_access_token(token, SECRET)


def test_garbage_token_rejected():
    with pytest.raises(InvalidToken):
        decode_access_token("not-a-jwt", SECRET)


def test_token_without_subject_rejected():
    token = create_access_token({"id": 1}, SECRET)

    with pytest.raises(InvalidToken):
        decode_access_token(token, SECRET)
