"""Database configuration and session management."""

from __future__ import annotations

from collections.abc import Generator
from functools import lru_cache

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from license_notifier.config import get_settings


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Return the engine bound to the configured ``DATABASE_URL``.

    Settings are resolved on first use, so a missing URL surfaces as a
    ``pydantic.ValidationError`` at the call site instead of at import time.
    """

    settings = get_settings()
    connect_args: dict[str, object] = {}
    if settings.database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(
        settings.database_url, pool_pre_ping=True, connect_args=connect_args
    )
    logger.debug("Created database engine for %s", engine.url.render_as_string())
    return engine


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker[Session]:
    """Return the session factory bound to :func:`get_engine`."""

    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def SessionLocal() -> Session:
    """Open a new session against the configured store."""

    return get_session_factory()()


def initialize_database() -> None:
    """Ensure all ORM models have corresponding database tables."""

    from license_notifier.infrastructure import models  # noqa: F401  # ensure models are imported

    Base.metadata.create_all(bind=get_engine(), checkfirst=True)


def reset_engine() -> None:
    """Dispose the cached engine so the next call honours new settings."""

    if get_engine.cache_info().currsize:
        get_engine().dispose()
    get_session_factory.cache_clear()
    get_engine.cache_clear()


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and close it afterwards."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


__all__ = [
    "Base",
    "SessionLocal",
    "get_db",
    "get_engine",
    "get_session_factory",
    "initialize_database",
    "reset_engine",
]
