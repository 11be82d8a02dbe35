"""Pydantic schemas for bookmark endpoints."""
from typing import Literal, Self

from pydantic import Field, model_validator

from schemas.validators import CamelModel, HttpUrlStr, OptionalText, OptionalUrlStr, UtcDateTime

# Sentinel category value matching bookmarks with no category (NULL or "")
UNCATEGORIZED = "uncategorized"

SortBy = Literal["createdAt", "updatedAt", "title", "orderIndex"]
SortOrder = Literal["asc", "desc"]

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class BookmarkCreate(CamelModel):
    """Schema for creating a new bookmark. id, orderIndex and timestamps are server-assigned."""

    url: HttpUrlStr
    title: str = Field(min_length=1, max_length=200)
    internal_url: OptionalUrlStr = None
    description: OptionalText = Field(default=None, max_length=1000)
    favicon: OptionalUrlStr = None
    og_image: OptionalUrlStr = None
    icon: OptionalText = Field(default=None, max_length=50)
    icon_url: OptionalUrlStr = None
    category: OptionalText = Field(default=None, max_length=50)
    tags: OptionalText = Field(default=None, max_length=500)
    is_read_later: bool = False


class BookmarkUpdate(CamelModel):
    """
    Schema for partially updating a bookmark.

    Only fields present in the request body are applied (merge semantics).
    Nullable fields may be cleared with an explicit null; required fields may not.
    """

    url: HttpUrlStr | None = None
    title: str | None = Field(default=None, min_length=1, max_length=200)
    internal_url: OptionalUrlStr = None
    description: OptionalText = Field(default=None, max_length=1000)
    favicon: OptionalUrlStr = None
    og_image: OptionalUrlStr = None
    icon: OptionalText = Field(default=None, max_length=50)
    icon_url: OptionalUrlStr = None
    category: OptionalText = Field(default=None, max_length=50)
    tags: OptionalText = Field(default=None, max_length=500)
    order_index: int | None = Field(default=None, ge=0)
    is_pinned: bool | None = None
    is_read_later: bool | None = None
    is_read: bool | None = None

    @model_validator(mode="after")
    def check_required_fields_not_cleared(self) -> Self:
        """Reject an explicit null for columns that cannot be NULL."""
        non_nullable = ("url", "title", "order_index", "is_pinned", "is_read_later", "is_read")
        for field in non_nullable:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"'{field}' cannot be null")
        return self


class BookmarkResponse(CamelModel):
    """Schema for bookmark responses."""

    id: str
    url: str
    internal_url: str | None
    title: str
    description: str | None
    favicon: str | None
    og_image: str | None
    icon: str | None
    icon_url: str | None
    category: str | None
    tags: str | None
    order_index: int
    is_pinned: bool
    is_read_later: bool
    is_read: bool
    visit_count: int
    created_at: UtcDateTime
    updated_at: UtcDateTime


class BookmarkQuery(CamelModel):
    """
    Pagination, filter and sort parameters for the paginated bookmark listing.

    Every filter is optional; present filters are AND-ed together.
    """

    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    search: str | None = None
    category: str | None = None
    is_pinned: bool | None = None
    is_read_later: bool | None = None
    sort_by: SortBy = "orderIndex"
    sort_order: SortOrder = "asc"

    def normalized(
        self,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
    ) -> "BookmarkQuery":
        """
        Return a copy with out-of-range pagination values replaced.

        - page < 1 becomes 1
        - page_size < 1 becomes default_page_size
        - page_size > max_page_size becomes max_page_size
        """
        page = max(self.page, 1)
        page_size = self.page_size
        if page_size < 1:
            page_size = default_page_size
        page_size = min(page_size, max_page_size)
        return self.model_copy(update={"page": page, "page_size": page_size})


class Pagination(CamelModel):
    """Pagination metadata returned alongside a page of items."""

    page: int
    page_size: int
    total: int
    total_pages: int
    has_more: bool


class BookmarkPage(CamelModel):
    """A page of bookmarks plus pagination metadata."""

    items: list[BookmarkResponse]
    pagination: Pagination


class ReorderItem(CamelModel):
    """New position for a single bookmark or category."""

    id: str = Field(min_length=1)
    order_index: int = Field(ge=0)


class ReorderRequest(CamelModel):
    """Batch of position updates applied in one request."""

    items: list[ReorderItem] = Field(min_length=1)


class SuccessResponse(CamelModel):
    """Generic acknowledgement body."""

    success: bool = True
