# tests/test_database.py

import pytest
from blogserver.config import Settings
from blogserver.database import engine_kwargs, make_engine


def _settings(url, timeout=15.0):
    return Settings(jwt_secret="x", database_url=url, db_timeout_sec=timeout)


def test_sqlite_waits_on_locks_for_timeout():
    kwargs = engine_kwargs(_settings("sqlite:///./blog.db"))

    assert kwargs["connect_args"] == {"check_same_thread": False, "timeout": 15.0}


@pytest.mark.parametrize("url", [
    "postgresql://u:p@db/blog",
    "postgresql+psycopg2://u:p@db/blog",
])
def test_postgres_bounds_connect_and_statements(url):
    kwargs = engine_kwargs(_settings(url))

    assert kwargs["connect_args"] == {
        "connect_timeout": 15,
        "options": "-c statement_timeout=15000",
    }
    assert kwargs["pool_timeout"] == 15.0
    assert kwargs["pool_pre_ping"] is True


@pytest.mark.parametrize("url", [
    "mysql+pymysql://u:p@db/blog",
    "mariadb+pymysql://u:p@db/blog",
])
def test_mysql_bounds_connect_read_and_write(url):
    kwargs = engine_kwargs(_settings(url))

    assert kwargs["connect_args"] == {
        "connect_timeout": 15,
        "read_timeout": 15,
        "write_timeout": 15,
    }
    assert kwargs["pool_timeout"] == 15.0


def test_make_engine_for_sqlite_file(tmp_path):
    engine = make_engine(_settings(f"sqlite:///{tmp_path / 'blog.db'}"))
    try:
        with engine.connect() as conn:
            assert conn.exec_driver_sql("select 1").scalar() == 1
    finally:
        engine.dispose()
