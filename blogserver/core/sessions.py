# blogserver/core/sessions.py

import secrets
from datetime import datetime, timedelta
from sqlalchemy.orm import Session
from blogserver.models.session import LoginSession
from blogserver.models.user import User


SESSION_TTL = timedelta(days=7)


def purge_expired_sessions(db: Session, now: datetime | None = None) -> int:
    cutoff = (now or datetime.now()) - SESSION_TTL
    removed = db.query(LoginSession).filter(LoginSession.created_at < cutoff).delete()
    db.commit()
    return removed


def create_session(db: Session, user: User) -> str:
    purge_expired_sessions(db)

    session_id = secrets.token_urlsafe(32)
    db.add(LoginSession(
        session_id=session_id,
        user_id=user.id,
        username=user.username,
    ))
    db.commit()
    return session_id


def get_session(db: Session, session_id: str | None) -> LoginSession | None:
    """
    Returns the live session for `session_id`. Sessions older than
    SESSION_TTL are deleted and treated as absent.
    """
    if not session_id:
        return None

    login_session = db.query(LoginSession).filter_by(session_id=session_id).first()
    if login_session is None:
        return None

    if login_session.created_at < datetime.now() - SESSION_TTL:
        destroy_session(db, session_id)
        return None
    return login_session


def destroy_session(db: Session, session_id: str | None):
    if not session_id:
        return
    db.query(LoginSession).filter_by(session_id=session_id).delete()
    db.commit()
