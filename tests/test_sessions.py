# tests/test_sessions.py

from datetime import datetime, timedelta
from blogserver.core.security import register_user
from blogserver.core.sessions import (
    SESSION_TTL,
    create_session,
    destroy_session,
    get_session,
    purge_expired_sessions,
)
from blogserver.models.session import LoginSession


def test_session_roundtrip(db, hasher):
    user = register_user(db, hasher, "alice", "s3cret")
    session_id = create_session(db, user)

    login_session = get_session(db, session_id)
    assert login_session.username == "alice"
    assert login_session.user_id == user.id

    destroy_session(db, session_id)
    assert get_session(db, session_id) is None


def test_missing_session_id(db):
    assert get_session(db, None) is None
    assert get_session(db, "") is None
    assert get_session(db, "never-issued") is None


def test_session_expires_after_ttl(db, hasher):
    user = register_user(db, hasher, "alice", "s3cret")
    session_id = create_session(db, user)
    row = db.query(LoginSession).filter_by(session_id=session_id).one()
    row.created_at = datetime.now() - SESSION_TTL - timedelta(seconds=5)
    db.commit()

    assert get_session(db, session_id) is None
    assert db.query(LoginSession).count() == 0


def test_new_session_purges_expired_rows(db, hasher):
    user = register_user(db, hasher, "alice", "s3cret")
    stale_id = create_session(db, user)
    db.query(LoginSession).filter_by(session_id=stale_id).update(
        {LoginSession.created_at: datetime.now() - timedelta(days=30)}
    )
    db.commit()

    fresh_id = create_session(db, user)

    assert [r.session_id for r in db.query(LoginSession).all()] == [fresh_id]


def test_purge_keeps_live_sessions(db, hasher):
    user = register_user(db, hasher, "alice", "s3cret")
    create_session(db, user)

    assert purge_expired_sessions(db) == 0
    assert db.query(LoginSession).count() == 1
