"""Bookmark model for storing dashboard links."""
from sqlalchemy import Boolean, Integer, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin, UUIDv7Mixin


class Bookmark(Base, UUIDv7Mixin, TimestampMixin):
    """Bookmark model - stores URLs with display metadata, flags and manual ordering."""

    __tablename__ = "bookmarks"

    url: Mapped[str] = mapped_column(Text, nullable=False)
    # Alternate link used when the client is on the internal network
    internal_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    favicon: Mapped[str | None] = mapped_column(Text, nullable=True)
    og_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon: Mapped[str | None] = mapped_column(String(50), nullable=True)  # symbolic icon name
    icon_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Category.id; NULL or "" means uncategorized. Not a database foreign key:
    # deleting a category clears it explicitly in the category service.
    category: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    tags: Mapped[str | None] = mapped_column(String(500), nullable=True)

    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_pinned: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(),
    )
    is_read_later: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(),
    )
    is_read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(),
    )

    visit_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
