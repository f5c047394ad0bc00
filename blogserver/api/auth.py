# blogserver/api/auth.py

from fastapi import APIRouter, Depends, Form, Header, Request, Cookie
from fastapi.responses import RedirectResponse
from loguru import logger
from pydantic import BaseModel
from sqlalchemy.orm import Session
from blogserver.config import Settings
from blogserver.core.errors import DuplicateUsername, InvalidCredentials, InvalidToken, ValidationError
from blogserver.core.security import (
    ACCESS_TOKEN_EXPIRE_DAYS,
    PasswordHasher,
    authenticate_user,
    decode_access_token,
    issue_token_for,
    register_user,
)
from blogserver.core.sessions import create_session, destroy_session
from blogserver.database import get_db
from blogserver.api.deps import SESSION_KEY, get_hasher, get_settings, render


router = APIRouter()

TOKEN_COOKIE = "token"


class TokenUser(BaseModel):
    id: int | None = None
    username: str
    exp: int


def _require_fields(**fields: str):
    missing = [name for name, value in fields.items() if not value or not value.strip()]
    if missing:
        raise ValidationError(f"Missing {', '.join(missing)}")


# -------------------------------
# Signup
# -------------------------------

@router.get("/signup")
def signup_form(request: Request):
    return render(request, "sign-up.html")


@router.post("/signup")
def signup(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_hasher),
):
    try:
        _require_fields(username=username, password=password)
        register_user(db, hasher, username, password)
    except (ValidationError, DuplicateUsername) as e:
        return render(request, "sign-up.html", {"error": e.message}, status_code=e.status_code)

    return RedirectResponse("/login", status_code=303)


# -------------------------------
# Login / Logout
# -------------------------------

@router.get("/login")
def login_form(request: Request):
    return render(request, "login.html")


@router.post("/login")
def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_hasher),
    settings: Settings = Depends(get_settings),
):
    try:
        user = authenticate_user(db, hasher, username, password)
    except InvalidCredentials as e:
        logger.info(f"Failed login for {username!r}")
        return render(request, "login.html", {"error": e.message}, status_code=e.status_code)

    # a new login replaces whatever session this browser held before
    destroy_session(db, request.session.get(SESSION_KEY))
    request.session[SESSION_KEY] = create_session(db, user)

    response = RedirectResponse("/", status_code=303)
    response.set_cookie(
        TOKEN_COOKIE,
        issue_token_for(user, settings.jwt_secret),
        max_age=ACCESS_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
    )
    return response


@router.get("/logout")
def logout(request: Request, db: Session = Depends(get_db)):
    destroy_session(db, request.session.pop(SESSION_KEY, None))
    request.session.clear()

    response = RedirectResponse("/", status_code=303)
    response.delete_cookie(TOKEN_COOKIE)
    return response


# -------------------------------
# Token check
# -------------------------------

@router.get("/users/me", response_model=TokenUser)
def read_users_me(
    token: str | None = Cookie(None),
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),
):
    """
    Verifies the signed token (cookie, or Bearer header) and returns its
    claims. Protected pages do not use this; they rely on the session.
    """
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1]
    if not token:
        raise InvalidToken()

    payload = decode_access_token(token, settings.jwt_secret)
    return {"id": payload.get("id"), "username": payload["sub"], "exp": payload["exp"]}
