"""Service layer for bookmark CRUD, reordering and paginated search."""
import logging
import math

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from models.base import utcnow
from models.bookmark import Bookmark
from schemas.bookmark import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    UNCATEGORIZED,
    BookmarkCreate,
    BookmarkQuery,
    BookmarkUpdate,
    Pagination,
    ReorderItem,
    SortBy,
)

logger = logging.getLogger(__name__)

SORT_COLUMNS: dict[SortBy, InstrumentedAttribute] = {
    "createdAt": Bookmark.created_at,
    "updatedAt": Bookmark.updated_at,
    "title": Bookmark.title,
    "orderIndex": Bookmark.order_index,
}

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    r"""
    Escape special LIKE characters for safe use in LIKE patterns.

    LIKE treats these characters specially:
    - % matches any sequence of characters
    - _ matches any single character
    - \\ is used as the escape character (passed explicitly, SQLite has no default)

    This function escapes them so they match literally.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_bookmark_filters(query: BookmarkQuery) -> list:
    """
    Build the WHERE clauses for a bookmark query.

    Each present filter contributes exactly one clause; the caller AND-s them.
    Absent filters contribute nothing.

    - search: case-insensitive substring over title, url and description (OR)
    - category: exact match, except the "uncategorized" sentinel which matches
      NULL or empty category (a real category with that id is never matched)
    - is_pinned / is_read_later: exact boolean match
    """
    clauses = []

    search = (query.search or "").strip()
    if search:
        pattern = f"%{escape_like(search)}%"
        clauses.append(
            or_(
                Bookmark.title.ilike(pattern, escape=LIKE_ESCAPE),
                Bookmark.url.ilike(pattern, escape=LIKE_ESCAPE),
                Bookmark.description.ilike(pattern, escape=LIKE_ESCAPE),
            ),
        )

    if query.category:
        if query.category == UNCATEGORIZED:
            clauses.append(or_(Bookmark.category.is_(None), Bookmark.category == ""))
        else:
            clauses.append(Bookmark.category == query.category)

    if query.is_pinned is not None:
        clauses.append(Bookmark.is_pinned == query.is_pinned)

    if query.is_read_later is not None:
        clauses.append(Bookmark.is_read_later == query.is_read_later)

    return clauses


def build_bookmark_ordering(query: BookmarkQuery) -> list:
    """
    Build the ORDER BY clauses for a bookmark query.

    Pinned bookmarks always come first regardless of the requested sort. Within
    each partition the requested column is applied; orderIndex ties are broken
    by newest created_at first.
    """
    column = SORT_COLUMNS[query.sort_by]
    direction = column.desc() if query.sort_order == "desc" else column.asc()
    ordering = [Bookmark.is_pinned.desc(), direction]
    if query.sort_by == "orderIndex":
        ordering.append(Bookmark.created_at.desc())
    return ordering


def build_pagination(page: int, page_size: int, total: int) -> Pagination:
    """Compute pagination metadata for a page of a result set of size total."""
    total_pages = math.ceil(total / page_size) if page_size > 0 else 0
    return Pagination(
        page=page,
        page_size=page_size,
        total=total,
        total_pages=total_pages,
        has_more=page < total_pages,
    )


async def search_bookmarks(
    db: AsyncSession,
    query: BookmarkQuery,
    default_page_size: int = DEFAULT_PAGE_SIZE,
    max_page_size: int = MAX_PAGE_SIZE,
) -> tuple[list[Bookmark], Pagination]:
    """
    Filter, sort and paginate bookmarks.

    Read-only. Out-of-range pagination values are normalized rather than rejected
    (page < 1 -> 1, page_size < 1 -> default, page_size > max -> max). A page past
    the end returns an empty list with correct totals.

    Args:
        db: Database session.
        query: Pagination/filter/sort parameters.
        default_page_size: Replacement for a non-positive page_size.
        max_page_size: Upper bound for page_size.

    Returns:
        Tuple of (bookmarks on the requested page, pagination metadata).
    """
    query = query.normalized(default_page_size, max_page_size)

    filters = build_bookmark_filters(query)

    count_query = select(func.count()).select_from(Bookmark).where(*filters)
    total = (await db.execute(count_query)).scalar_one()

    pagination = build_pagination(query.page, query.page_size, total)

    offset = (query.page - 1) * query.page_size
    # Past the last page there is nothing to fetch; OFFSET must also fit in a 64-bit integer
    if offset >= total:
        return [], pagination

    page_query = (
        select(Bookmark)
        .where(*filters)
        .order_by(*build_bookmark_ordering(query))
        .offset(offset)
        .limit(query.page_size)
    )
    result = await db.execute(page_query)
    items = list(result.scalars().all())

    return items, pagination


async def list_bookmarks(db: AsyncSession) -> list[Bookmark]:
    """Get every bookmark in display order (pinned, orderIndex, newest first)."""
    result = await db.execute(
        select(Bookmark).order_by(
            Bookmark.is_pinned.desc(),
            Bookmark.order_index.asc(),
            Bookmark.created_at.desc(),
        ),
    )
    return list(result.scalars().all())


async def get_bookmark(db: AsyncSession, bookmark_id: str) -> Bookmark | None:
    """Get a bookmark by ID. Returns None if not found."""
    return await db.get(Bookmark, bookmark_id)


async def _next_order_index(db: AsyncSession) -> int:
    max_order = (await db.execute(select(func.max(Bookmark.order_index)))).scalar_one_or_none()
    return 0 if max_order is None else max_order + 1


async def create_bookmark(db: AsyncSession, data: BookmarkCreate) -> Bookmark:
    """
    Create a new bookmark at the end of the manual order.

    Saves exactly what is provided - no automatic URL scraping. Callers who want
    metadata should use the metadata endpoint first.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    bookmark = Bookmark(
        **data.model_dump(),
        order_index=await _next_order_index(db),
        is_pinned=False,
        is_read=False,
    )
    db.add(bookmark)
    await db.flush()
    await db.refresh(bookmark)
    logger.info("Created bookmark %s (%s)", bookmark.id, bookmark.url)
    return bookmark


async def update_bookmark(
    db: AsyncSession,
    bookmark_id: str,
    data: BookmarkUpdate,
) -> Bookmark | None:
    """
    Apply a partial update. Returns None if not found.

    Only fields set in the request are changed; updated_at is always refreshed.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    bookmark = await get_bookmark(db, bookmark_id)
    if bookmark is None:
        return None

    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(bookmark, field, value)
    # Set explicitly so an empty patch still counts as a mutation
    bookmark.updated_at = utcnow()

    await db.flush()
    await db.refresh(bookmark)
    return bookmark


async def reorder_bookmarks(db: AsyncSession, items: list[ReorderItem]) -> None:
    """
    Set order_index for each listed bookmark. Unknown IDs are ignored.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    for item in items:
        await db.execute(
            update(Bookmark)
            .where(Bookmark.id == item.id)
            .values(order_index=item.order_index),
        )
    await db.flush()


async def delete_bookmark(db: AsyncSession, bookmark_id: str) -> bool:
    """
    Permanently delete a bookmark. Returns True if a row was deleted.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    result = await db.execute(delete(Bookmark).where(Bookmark.id == bookmark_id))
    return result.rowcount > 0
