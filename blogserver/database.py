# blogserver/database.py

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from blogserver.config import Settings
from blogserver.models import Base


def engine_kwargs(settings: Settings) -> dict:
    """
    Bounded waits for connecting, running statements and taking a pooled
    connection, so a hung database surfaces as an error instead of
    blocking a request forever.
    """
    backend = make_url(settings.database_url).get_backend_name()
    timeout = settings.db_timeout_sec

    if backend == "sqlite":
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": timeout,
            },
        }

    if backend == "postgresql":
        connect_args = {
            "connect_timeout": int(timeout),
            "options": f"-c statement_timeout={int(timeout * 1000)}",
        }
    elif backend in ("mysql", "mariadb"):
        connect_args = {
            "connect_timeout": int(timeout),
            "read_timeout": int(timeout),
            "write_timeout": int(timeout),
        }
    else:
        connect_args = {}

    return {
        "connect_args": connect_args,
        "pool_pre_ping": True,
        "pool_timeout": timeout,
    }


def make_engine(settings: Settings) -> Engine:
    return create_engine(settings.database_url, **engine_kwargs(settings))


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine
    )


def init_db(engine: Engine):
    Base.metadata.create_all(bind=engine)


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
