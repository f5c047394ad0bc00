# blogserver/api/deps.py

from dataclasses import dataclass
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from blogserver.config import Settings
from blogserver.core.errors import LoginRequired
from blogserver.core.images import ImageUploader
from blogserver.core.security import PasswordHasher
from blogserver.core.sessions import get_session
from blogserver.database import get_db


SESSION_KEY = "sid"


@dataclass
class CurrentUser:
    id: int
    username: str


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


def get_uploader(request: Request) -> ImageUploader:
    return request.app.state.uploader


def render(request: Request, name: str, context: dict | None = None, status_code: int = 200):
    """
    Renders a template with the session user available as `user`.
    """
    context = dict(context or {})
    context.setdefault("user", getattr(request.state, "user", None))
    return request.app.state.templates.TemplateResponse(
        request, name, context, status_code=status_code
    )


def get_session_user(request: Request, db: Session = Depends(get_db)) -> CurrentUser | None:
    login_session = get_session(db, request.session.get(SESSION_KEY))
    if login_session is None:
        request.state.user = None
        return None

    user = CurrentUser(id=login_session.user_id, username=login_session.username)
    request.state.user = user
    return user


def require_user(user: CurrentUser | None = Depends(get_session_user)) -> CurrentUser:
    """
    Auth gate: presence of a live server-side session, nothing more.
    """
    if user is None:
        raise LoginRequired()
    return user
