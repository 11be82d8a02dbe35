"""Visit model for bookmark click analytics."""
from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, UUIDv7Mixin, utcnow


class Visit(Base, UUIDv7Mixin):
    """
    A single recorded open of a bookmark.

    bookmark_id is not a foreign key; visits are kept as an append-only log and
    queries join against bookmarks, so visits of deleted bookmarks simply drop
    out of per-bookmark reports.
    """

    __tablename__ = "visits"

    bookmark_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    visited_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True,
    )
    ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    referer: Mapped[str | None] = mapped_column(Text, nullable=True)
