"""Category model for grouping bookmarks."""
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, UUIDv7Mixin


class Category(Base, UUIDv7Mixin):
    """Category model - a named, colored, ordered bookmark group."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    icon: Mapped[str | None] = mapped_column(String(50), nullable=True)
    color: Mapped[str | None] = mapped_column(String(7), nullable=True)  # "#RRGGBB"
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
