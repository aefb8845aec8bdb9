"""Database configuration and session management."""

from collections.abc import Generator
from functools import lru_cache
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from config.settings import settings


@lru_cache()
def get_engine() -> Engine:
    """Get the cached database engine.

    Created on first use so that importing the application does not open a
    connection pool.
    """
    return create_engine(
        settings.database_url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=5,
        pool_recycle=300,
        echo=False,
    )


@lru_cache()
def get_session_factory() -> sessionmaker:
    """Session factory bound to the application engine."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=get_engine(),
    )


def get_db() -> Generator[Session, Any, None]:
    """Dependency that provides a database session.

    Yields a SQLAlchemy session and ensures proper cleanup after use.
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
