"""Bookmark CRUD, reorder and paginated listing endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_settings
from core.config import Settings
from schemas.bookmark import (
    BookmarkCreate,
    BookmarkPage,
    BookmarkQuery,
    BookmarkResponse,
    BookmarkUpdate,
    ReorderRequest,
    SortBy,
    SortOrder,
    SuccessResponse,
)
from services import bookmark_service

router = APIRouter(prefix="/api/bookmarks", tags=["bookmarks"])


@router.get("", response_model=list[BookmarkResponse])
async def list_bookmarks(
    db: AsyncSession = Depends(get_async_session),
) -> list[BookmarkResponse]:
    """List every bookmark: pinned first, then by orderIndex, then newest first."""
    bookmarks = await bookmark_service.list_bookmarks(db)
    return [BookmarkResponse.model_validate(b) for b in bookmarks]


@router.get("/paginated", response_model=BookmarkPage)
async def list_bookmarks_paginated(
    page: int = Query(default=1, ge=1, description="Page number (1-based)"),
    page_size: int | None = Query(
        default=None,
        ge=1,
        alias="pageSize",
        description="Items per page, at most the configured maximum",
    ),
    search: str | None = Query(
        default=None, max_length=100, description="Case-insensitive match on title, url, description",  # noqa: E501
    ),
    category: str | None = Query(
        default=None, max_length=50, description="Category id, or 'uncategorized'",
    ),
    is_pinned: bool | None = Query(default=None, alias="isPinned"),
    is_read_later: bool | None = Query(default=None, alias="isReadLater"),
    sort_by: SortBy = Query(default="orderIndex", alias="sortBy"),
    sort_order: SortOrder = Query(default="asc", alias="sortOrder"),
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> BookmarkPage:
    """
    Page through bookmarks with optional filters.

    - **search**: substring match across title, url and description (case-insensitive)
    - **category**: exact category id; `uncategorized` matches bookmarks with no category
    - **isPinned** / **isReadLater**: boolean filters
    - **sortBy** / **sortOrder**: applied within the pinned and unpinned groups;
      pinned bookmarks always come first
    """
    if page_size is not None and page_size > settings.max_page_size:
        raise HTTPException(
            status_code=422,
            detail=f"pageSize must be at most {settings.max_page_size}",
        )
    query = BookmarkQuery(
        page=page,
        page_size=page_size or settings.default_page_size,
        search=search,
        category=category,
        is_pinned=is_pinned,
        is_read_later=is_read_later,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    bookmarks, pagination = await bookmark_service.search_bookmarks(
        db,
        query,
        default_page_size=settings.default_page_size,
        max_page_size=settings.max_page_size,
    )
    return BookmarkPage(
        items=[BookmarkResponse.model_validate(b) for b in bookmarks],
        pagination=pagination,
    )


@router.post("", response_model=BookmarkResponse, status_code=201)
async def create_bookmark(
    data: BookmarkCreate,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Create a new bookmark at the end of the manual order."""
    bookmark = await bookmark_service.create_bookmark(db, data)
    return BookmarkResponse.model_validate(bookmark)


@router.patch("/reorder", response_model=SuccessResponse)
async def reorder_bookmarks(
    data: ReorderRequest,
    db: AsyncSession = Depends(get_async_session),
) -> SuccessResponse:
    """Set orderIndex for a batch of bookmarks. Unknown ids are ignored."""
    await bookmark_service.reorder_bookmarks(db, data.items)
    return SuccessResponse()


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    bookmark_id: str,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Get a single bookmark by ID."""
    bookmark = await bookmark_service.get_bookmark(db, bookmark_id)
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return BookmarkResponse.model_validate(bookmark)


@router.patch("/{bookmark_id}", response_model=BookmarkResponse)
async def update_bookmark(
    bookmark_id: str,
    data: BookmarkUpdate,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Partially update a bookmark; omitted fields keep their current value."""
    bookmark = await bookmark_service.update_bookmark(db, bookmark_id, data)
    if bookmark is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/{bookmark_id}", status_code=204)
async def delete_bookmark(
    bookmark_id: str,
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Permanently delete a bookmark. Deleting an unknown id is not an error."""
    await bookmark_service.delete_bookmark(db, bookmark_id)
