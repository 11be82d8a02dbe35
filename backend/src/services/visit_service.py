"""Service layer for bookmark visit tracking and analytics."""
from datetime import date, datetime, timedelta

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import utcnow
from models.bookmark import Bookmark
from models.visit import Visit
from schemas.visit import (
    BookmarkVisitStats,
    Period,
    RecentVisit,
    TopBookmark,
    TrendPoint,
    VisitBookmarkSummary,
    VisitStats,
)

BOOKMARK_TREND_DAYS = 7

# Rolling windows measured back from now; "day" starts at UTC midnight
PERIOD_LENGTHS: dict[str, timedelta] = {
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
}


def start_of_day(value: datetime) -> datetime:
    """Midnight (UTC) of the given datetime's day."""
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def period_start(period: Period, now: datetime | None = None) -> datetime | None:
    """Start of a reporting period, or None for "all"."""
    now = now or utcnow()
    if period == "all":
        return None
    if period == "day":
        return start_of_day(now)
    return now - PERIOD_LENGTHS[period]


def trend_dates(days: int, today: date) -> list[date]:
    """The last `days` calendar days ending today, oldest first."""
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def _to_date(value: object) -> date:
    # SQLite returns date() results as 'YYYY-MM-DD' strings; other backends return dates
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


async def track_visit(
    db: AsyncSession,
    bookmark_id: str,
    ip: str | None = None,
    user_agent: str | None = None,
    referer: str | None = None,
) -> Visit | None:
    """
    Record a visit and increment the bookmark's visit counter.

    A visit is not an edit, so the bookmark's updated_at is left unchanged.

    Returns:
        The recorded Visit, or None if the bookmark does not exist.
    """
    bookmark = await db.get(Bookmark, bookmark_id)
    if bookmark is None:
        return None

    visit = Visit(bookmark_id=bookmark_id, ip=ip, user_agent=user_agent, referer=referer)
    db.add(visit)
    await db.execute(
        update(Bookmark)
        .where(Bookmark.id == bookmark_id)
        .values(visit_count=Bookmark.visit_count + 1, updated_at=Bookmark.updated_at),
    )
    await db.flush()
    await db.refresh(bookmark)
    return visit


async def _count_visits_since(db: AsyncSession, since: datetime) -> int:
    result = await db.execute(
        select(func.count()).select_from(Visit).where(Visit.visited_at >= since),
    )
    return result.scalar_one()


async def get_stats(db: AsyncSession, now: datetime | None = None) -> VisitStats:
    """Overall visit counters: total, today, last 7 and 30 days, and bookmark coverage."""
    now = now or utcnow()
    today = start_of_day(now)

    total_visits = (await db.execute(select(func.count()).select_from(Visit))).scalar_one()
    total_bookmarks = (await db.execute(select(func.count()).select_from(Bookmark))).scalar_one()
    visited_bookmarks = (
        await db.execute(select(func.count(func.distinct(Visit.bookmark_id))))
    ).scalar_one()

    return VisitStats(
        total_visits=total_visits,
        today_visits=await _count_visits_since(db, today),
        week_visits=await _count_visits_since(db, today - timedelta(days=7)),
        month_visits=await _count_visits_since(db, today - timedelta(days=30)),
        total_bookmarks=total_bookmarks,
        visited_bookmarks=visited_bookmarks,
    )


async def get_top_bookmarks(
    db: AsyncSession,
    limit: int = 10,
    period: Period = "all",
    now: datetime | None = None,
) -> list[TopBookmark]:
    """
    Most visited bookmarks.

    For "all" the stored visit_count is used; for other periods visits since the
    period start are counted.
    """
    start = period_start(period, now)
    if start is None:
        result = await db.execute(
            select(Bookmark)
            .where(Bookmark.visit_count > 0)
            .order_by(Bookmark.visit_count.desc())
            .limit(limit),
        )
        return [TopBookmark.model_validate(b) for b in result.scalars().all()]

    visit_count = func.count(Visit.id).label("period_visits")
    result = await db.execute(
        select(Bookmark, visit_count)
        .join(Visit, Visit.bookmark_id == Bookmark.id)
        .where(Visit.visited_at >= start)
        .group_by(Bookmark.id)
        .order_by(visit_count.desc())
        .limit(limit),
    )
    top = []
    for bookmark, count in result.all():
        item = TopBookmark.model_validate(bookmark)
        item.visit_count = count
        top.append(item)
    return top


async def _daily_counts(
    db: AsyncSession,
    since: datetime,
    bookmark_id: str | None = None,
) -> dict[date, int]:
    day = func.date(Visit.visited_at).label("day")
    query = select(day, func.count()).where(Visit.visited_at >= since).group_by(day)
    if bookmark_id is not None:
        query = query.where(Visit.bookmark_id == bookmark_id)
    result = await db.execute(query)
    return {_to_date(row_day): count for row_day, count in result.all()}


async def get_trend(
    db: AsyncSession,
    days: int = 7,
    now: datetime | None = None,
) -> list[TrendPoint]:
    """Daily visit counts for the last `days` days (oldest first, zero-filled)."""
    now = now or utcnow()
    dates = trend_dates(days, now.date())
    counts = await _daily_counts(db, start_of_day(now) - timedelta(days=days - 1))
    return [TrendPoint(date=d, count=counts.get(d, 0)) for d in dates]


async def get_recent_visits(db: AsyncSession, limit: int = 20) -> list[RecentVisit]:
    """Newest visits with the bookmark each refers to."""
    result = await db.execute(
        select(Visit, Bookmark)
        .join(Bookmark, Visit.bookmark_id == Bookmark.id)
        .order_by(Visit.visited_at.desc())
        .limit(limit),
    )
    return [
        RecentVisit(
            id=visit.id,
            visited_at=visit.visited_at,
            ip=visit.ip,
            user_agent=visit.user_agent,
            bookmark=VisitBookmarkSummary.model_validate(bookmark),
        )
        for visit, bookmark in result.all()
    ]


async def get_bookmark_stats(
    db: AsyncSession,
    bookmark_id: str,
    now: datetime | None = None,
) -> BookmarkVisitStats | None:
    """Visit count, last visit time and 7-day trend for one bookmark. None if not found."""
    bookmark = await db.get(Bookmark, bookmark_id)
    if bookmark is None:
        return None

    now = now or utcnow()
    dates = trend_dates(BOOKMARK_TREND_DAYS, now.date())
    counts = await _daily_counts(
        db,
        start_of_day(now) - timedelta(days=BOOKMARK_TREND_DAYS - 1),
        bookmark_id=bookmark_id,
    )
    last_visited = (
        await db.execute(
            select(func.max(Visit.visited_at)).where(Visit.bookmark_id == bookmark_id),
        )
    ).scalar_one_or_none()

    return BookmarkVisitStats(
        bookmark_id=bookmark.id,
        visit_count=bookmark.visit_count,
        last_visited=last_visited,
        trend=[counts.get(d, 0) for d in dates],
    )


async def clear_visits(db: AsyncSession) -> None:
    """Delete every visit and reset all bookmark visit counters."""
    await db.execute(delete(Visit))
    await db.execute(
        update(Bookmark).values(visit_count=0, updated_at=Bookmark.updated_at),
    )
    await db.flush()
