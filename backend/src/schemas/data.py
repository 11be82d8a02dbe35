"""Pydantic schemas for bulk data export and import."""
from typing import Self

from pydantic import Field, model_validator

from schemas.bookmark import BookmarkResponse
from schemas.category import CategoryResponse
from schemas.validators import (
    CamelModel,
    HexColor,
    HttpUrlStr,
    OptionalText,
    UtcDateTime,
)

EXPORT_VERSION = "1.0"


class ExportedData(CamelModel):
    """Every bookmark and category, in display order."""

    bookmarks: list[BookmarkResponse]
    categories: list[CategoryResponse]


class DataExport(CamelModel):
    """Versioned export document."""

    version: str = EXPORT_VERSION
    exported_at: UtcDateTime
    data: ExportedData


class BookmarkImport(CamelModel):
    """
    A bookmark as it appears in an import document.

    Server-managed fields are optional: a missing id is generated and missing
    timestamps default to the time of import. Unknown keys are ignored, so an
    exported bookmark can be imported unchanged.
    """

    id: str | None = Field(default=None, min_length=1, max_length=36)
    url: HttpUrlStr
    title: str = Field(min_length=1, max_length=200)
    internal_url: OptionalText = None
    description: OptionalText = None
    favicon: OptionalText = None
    og_image: OptionalText = None
    icon: OptionalText = Field(default=None, max_length=50)
    icon_url: OptionalText = None
    category: OptionalText = Field(default=None, max_length=50)
    tags: OptionalText = Field(default=None, max_length=500)
    order_index: int = Field(default=0, ge=0)
    is_pinned: bool = False
    is_read_later: bool = False
    is_read: bool = False
    visit_count: int = Field(default=0, ge=0)
    created_at: UtcDateTime | None = None
    updated_at: UtcDateTime | None = None


class CategoryImport(CamelModel):
    """A category as it appears in an import document. The id is kept as-is."""

    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=50)
    icon: OptionalText = Field(default=None, max_length=50)
    color: HexColor = None
    order_index: int = Field(default=0, ge=0)


class DataImport(CamelModel):
    """
    Import document. Replaces all bookmarks.

    Categories are replaced only when the key is present; omitting it keeps the
    existing categories.
    """

    bookmarks: list[BookmarkImport]
    categories: list[CategoryImport] | None = None

    @model_validator(mode="after")
    def check_unique_ids(self) -> Self:
        """Reject documents that reuse an id within bookmarks or within categories."""
        bookmark_ids = [b.id for b in self.bookmarks if b.id is not None]
        if len(bookmark_ids) != len(set(bookmark_ids)):
            raise ValueError("Duplicate bookmark id in import")
        category_ids = [c.id for c in self.categories or []]
        if len(category_ids) != len(set(category_ids)):
            raise ValueError("Duplicate category id in import")
        return self


class ImportResult(CamelModel):
    """Counts of imported rows."""

    success: bool = True
    bookmarks: int
    categories: int
