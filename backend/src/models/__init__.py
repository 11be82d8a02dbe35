"""SQLAlchemy models."""
from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.bookmark import Bookmark
from models.category import Category
from models.visit import Visit

__all__ = ["Base", "Bookmark", "Category", "TimestampMixin", "UUIDv7Mixin", "Visit"]
