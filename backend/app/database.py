"""
Database connection and session management module.

Uses SQLAlchemy for ORM operations. Supports PostgreSQL and SQLite
(the default for local use). Provides the engine factory, the session
factory and the declarative base shared by all ORM models.
"""

import os
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "sqlite:///./student_records.db"
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


def build_engine(url: str = DATABASE_URL) -> Engine:
    """
    Create an engine configured for the database type in ``url``.

    SQLite does not support pool_size, max_overflow or pool_pre_ping, and
    needs check_same_thread=False because FastAPI serves sync routes from a
    thread pool.
    """
    engine_kwargs = {"echo": False}

    if url.startswith("postgresql"):
        engine_kwargs.update({
            "pool_size": 10,
            "max_overflow": 20,
            "pool_pre_ping": True,
        })
    elif url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}

    new_engine = create_engine(url, **engine_kwargs)

    if url.startswith("sqlite"):
        @event.listens_for(new_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


def build_session_factory(bind: Engine) -> sessionmaker:
    """Session factory bound to ``bind``."""
    return sessionmaker(autocommit=False, autoflush=False, bind=bind, expire_on_commit=False)


engine = build_engine(DATABASE_URL)


def create_tables(bind: Engine = None):
    """
    Create all tables directly (used for SQLite and tests).
    For PostgreSQL, use the Alembic migration instead.
    """
    # Models must be imported so they register with Base.metadata
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
