"""SQLAlchemy declarative base with common mixins."""
from datetime import UTC, datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from uuid6 import uuid7


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def generate_id() -> str:
    """Generate a time-ordered opaque identifier (UUIDv7 as text)."""
    return str(uuid7())


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class UUIDv7Mixin:
    """Mixin that adds a text primary key populated with a UUIDv7 on insert."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at columns.

    Timestamps are generated in Python rather than by the database because SQLite
    has no wall-clock timestamp function with sub-second precision. updated_at is
    refreshed by SQLAlchemy on every ORM UPDATE of the row.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
        index=True,  # Index for "sort by recently updated" queries
    )
