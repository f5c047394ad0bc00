# blogserver/core/security.py

from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from loguru import logger
from blogserver.core.errors import DuplicateUsername, InvalidCredentials, InvalidToken
from blogserver.models.user import User


ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_DAYS = 7


class PasswordHasher:
    """
    bcrypt hashing with a fixed cost factor.
    """

    def __init__(self, rounds: int = 10):
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        return self.pwd_context.verify(plain_password, hashed_password)

    def dummy_verify(self):
        self.pwd_context.dummy_verify()


# -------------------------------
# Credential store
# -------------------------------

def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def register_user(db: Session, hasher: PasswordHasher, username: str, password: str) -> User:
    if get_user_by_username(db, username):
        raise DuplicateUsername()

    new_user = User(username=username, hashed_password=hasher.hash(password))
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # lost the race against a concurrent signup with the same name
        db.rollback()
        raise DuplicateUsername()

    db.refresh(new_user)
    logger.info(f"Registered user {username!r}")
    return new_user


def authenticate_user(db: Session, hasher: PasswordHasher, username: str, password: str) -> User:
    user = get_user_by_username(db, username)
    if user is None:
        hasher.dummy_verify()
        raise InvalidCredentials()
    if not hasher.verify(password, user.hashed_password):
        raise InvalidCredentials()
    return user


# -------------------------------
# Signed tokens
# -------------------------------

def create_access_token(
    data: dict,
    secret_key: str,
    expires_delta: timedelta | None = None,
) -> str:
    to_encode = data.copy()
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode.update({"iat": issued_at, "exp": expire})
    return jwt.encode(to_encode, secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str, secret_key: str) -> dict:
    """
    Checks signature and expiry and returns the claims.
    """
    try:
        payload = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    except JWTError:
        raise InvalidToken()

    if payload.get("sub") is None:
        raise InvalidToken()
    return payload


def issue_token_for(user: User, secret_key: str) -> str:
    return create_access_token(
        data={"sub": user.username, "id": user.id},
        secret_key=secret_key,
    )
