"""Database configuration and session management.

This module provides the SQLAlchemy declarative base, the ``Database``
handle that owns the engine and session factory, and the session
dependency for FastAPI routes.
"""

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool


Base = declarative_base()
"""Declarative base class for SQLAlchemy models."""


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _register_unicode_lower(dbapi_conn, connection_record):
    """
    Replace SQLite's ASCII-only ``lower()`` on a new connection.

    ``ilike`` compiles to ``lower(x) LIKE lower(y)`` on SQLite, so this makes
    case-insensitive filters fold non-ASCII letters too.
    """
    dbapi_conn.create_function("lower", 1, _unicode_lower, deterministic=True)


class Database:
    """Engine and session factory built once at application startup.

    Args:
        url (str): SQLAlchemy database URL.
    """

    def __init__(self, url: str):
        kwargs = {"future": True}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in url:
                # every session must see the same in-memory database
                kwargs["poolclass"] = StaticPool
        self.engine = create_engine(url, **kwargs)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _register_unicode_lower)
        self.session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            future=True,
        )

    def create_all(self):
        """Create tables for all registered models."""
        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        """Open a new session bound to this database."""
        return self.session_factory()

    def dispose(self):
        """Release pooled connections."""
        self.engine.dispose()


def get_db(request: Request):
    """
    Provide a SQLAlchemy database session.

    This function is used as a FastAPI dependency.
    It yields a session from the application's ``Database`` handle and
    ensures it is closed after the request is completed.
    """

    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
