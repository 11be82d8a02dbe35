"""Service layer for bulk export and import of bookmarks and categories."""
import logging

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import utcnow
from models.bookmark import Bookmark
from models.category import Category
from schemas.bookmark import BookmarkResponse
from schemas.category import CategoryResponse
from schemas.data import DataExport, DataImport, ExportedData, ImportResult
from services.bookmark_service import list_bookmarks
from services.category_service import get_categories

logger = logging.getLogger(__name__)


async def export_data(db: AsyncSession) -> DataExport:
    """Snapshot every bookmark and category. Read-only."""
    bookmarks = await list_bookmarks(db)
    categories = await get_categories(db)
    return DataExport(
        exported_at=utcnow(),
        data=ExportedData(
            bookmarks=[BookmarkResponse.model_validate(b) for b in bookmarks],
            categories=[CategoryResponse.model_validate(c) for c in categories],
        ),
    )


async def import_data(db: AsyncSession, data: DataImport) -> ImportResult:
    """
    Replace stored bookmarks (and categories, when provided) with the document's.

    Visit history is left alone; visits whose bookmark id is not re-imported drop
    out of the per-bookmark reports.

    Note: Does not commit. Caller (session generator) handles commit at request end,
    so a failure part-way leaves the previous data intact.
    """
    now = utcnow()

    await db.execute(delete(Bookmark))
    if data.categories is not None:
        await db.execute(delete(Category))
        for category in data.categories:
            db.add(Category(**category.model_dump()))

    for item in data.bookmarks:
        values = item.model_dump(exclude={"id", "created_at", "updated_at"})
        bookmark = Bookmark(
            **values,
            created_at=item.created_at or now,
            updated_at=item.updated_at or item.created_at or now,
        )
        if item.id is not None:
            bookmark.id = item.id
        db.add(bookmark)

    await db.flush()

    category_count = len(data.categories) if data.categories is not None else 0
    logger.info(
        "Imported %d bookmarks and %d categories", len(data.bookmarks), category_count,
    )
    return ImportResult(bookmarks=len(data.bookmarks), categories=category_count)
