"""Tests for app/db/engine.py - Database engine and session management."""

import contextlib

from sqlalchemy import inspect
from sqlmodel import Session

from app.db.engine import build_engine, engine, get_session, init_db


def test_get_session():
    """Test get_session() yields a database session bound to the engine."""
    gen = get_session()
    session = next(gen)

    assert isinstance(session, Session)
    assert session.get_bind() is engine

    with contextlib.suppress(StopIteration):
        next(gen)


def test_init_db_creates_user_table():
    init_db()

    assert "users" in inspect(engine).get_table_names()


def test_build_engine_sqlite_allows_cross_thread_use():
    sqlite_engine = build_engine("sqlite://")

    with sqlite_engine.connect() as connection:
        assert connection.exec_driver_sql("SELECT 1").scalar() == 1
