"""Service layer for category operations."""
import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark
from models.category import Category
from schemas.bookmark import ReorderItem
from schemas.category import CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)

# Seeded into an empty database; ids are stable slugs so clients can rely on them
DEFAULT_CATEGORIES = [
    {"id": "dev", "name": "Development", "icon": "code", "color": "#667eea"},
    {"id": "productivity", "name": "Productivity", "icon": "zap", "color": "#f093fb"},
    {"id": "design", "name": "Design", "icon": "palette", "color": "#f5576c"},
    {"id": "reading", "name": "Reading", "icon": "book", "color": "#43e97b"},
    {"id": "media", "name": "Media", "icon": "play", "color": "#fa709a"},
]


async def get_categories(db: AsyncSession) -> list[Category]:
    """Get all categories ordered by order_index."""
    result = await db.execute(select(Category).order_by(Category.order_index.asc()))
    return list(result.scalars().all())


async def get_category(db: AsyncSession, category_id: str) -> Category | None:
    """Get a category by ID. Returns None if not found."""
    return await db.get(Category, category_id)


async def create_category(db: AsyncSession, data: CategoryCreate) -> Category:
    """
    Create a category at the end of the order.

    Note: Does not commit. Caller (session generator) handles commit at request end.
    """
    max_order = (await db.execute(select(func.max(Category.order_index)))).scalar_one_or_none()
    category = Category(
        **data.model_dump(),
        order_index=0 if max_order is None else max_order + 1,
    )
    db.add(category)
    await db.flush()
    await db.refresh(category)
    return category


async def update_category(
    db: AsyncSession,
    category_id: str,
    data: CategoryUpdate,
) -> Category | None:
    """
    Apply a partial update. Returns None if not found.

    Note: Does not commit. Caller (session generator) handles commit at request end.
    """
    category = await get_category(db, category_id)
    if category is None:
        return None

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(category, field, value)

    await db.flush()
    await db.refresh(category)
    return category


async def reorder_categories(db: AsyncSession, items: list[ReorderItem]) -> None:
    """Set order_index for each listed category. Unknown IDs are ignored."""
    for item in items:
        await db.execute(
            update(Category)
            .where(Category.id == item.id)
            .values(order_index=item.order_index),
        )
    await db.flush()


async def delete_category(db: AsyncSession, category_id: str) -> None:
    """
    Delete a category and move its bookmarks to uncategorized.

    Deleting an unknown ID is a no-op.

    Note: Does not commit. Caller (session generator) handles commit at request end.
    """
    await db.execute(
        update(Bookmark)
        .where(Bookmark.category == category_id)
        .values(category=None),
    )
    await db.execute(delete(Category).where(Category.id == category_id))


async def seed_default_categories(db: AsyncSession) -> bool:
    """
    Insert DEFAULT_CATEGORIES if the categories table is empty.

    Returns:
        True if defaults were inserted, False if categories already existed.
    """
    count = (await db.execute(select(func.count()).select_from(Category))).scalar_one()
    if count:
        return False

    for order_index, values in enumerate(DEFAULT_CATEGORIES):
        db.add(Category(**values, order_index=order_index))
    await db.flush()
    logger.info("Seeded %d default categories", len(DEFAULT_CATEGORIES))
    return True
