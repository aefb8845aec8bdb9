"""SQLAlchemy base class and mixins."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base class."""

    pass


class TimestampModel:
    """Mixin for created/updated timestamp columns.

    The database assigns both on insert; the Python-side defaults keep
    microsecond ordering on backends whose ``now()`` is coarser.
    """

    created_at: Mapped[datetime] = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    updated_at: Mapped[datetime] = Column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )
