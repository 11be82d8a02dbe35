"""Visit tracking and analytics endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session
from schemas.bookmark import SuccessResponse
from schemas.visit import (
    BookmarkVisitStats,
    Period,
    RecentVisit,
    TopBookmark,
    TrackVisitRequest,
    TrendPoint,
    VisitStats,
)
from services import visit_service

router = APIRouter(prefix="/api/visits", tags=["visits"])


def client_ip(request: Request) -> str | None:
    """Originating client address, honouring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


@router.post("/track", response_model=SuccessResponse)
async def track_visit(
    data: TrackVisitRequest,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
) -> SuccessResponse:
    """Record that a bookmark was opened and bump its visit count."""
    visit = await visit_service.track_visit(
        db,
        data.bookmark_id,
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent"),
        referer=request.headers.get("referer"),
    )
    if visit is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return SuccessResponse()


@router.get("/stats", response_model=VisitStats)
async def get_stats(
    db: AsyncSession = Depends(get_async_session),
) -> VisitStats:
    """Overall visit counters."""
    return await visit_service.get_stats(db)


@router.get("/top", response_model=list[TopBookmark])
async def get_top_bookmarks(
    limit: int = Query(default=10, ge=1, le=50),
    period: Period = Query(default="all"),
    db: AsyncSession = Depends(get_async_session),
) -> list[TopBookmark]:
    """Most visited bookmarks for a period (day, week, month, year or all)."""
    return await visit_service.get_top_bookmarks(db, limit=limit, period=period)


@router.get("/trend", response_model=list[TrendPoint])
async def get_trend(
    days: int = Query(default=7, ge=1, le=90),
    db: AsyncSession = Depends(get_async_session),
) -> list[TrendPoint]:
    """Daily visit counts for the last N days, oldest first."""
    return await visit_service.get_trend(db, days=days)


@router.get("/recent", response_model=list[RecentVisit])
async def get_recent_visits(
    limit: int = Query(default=20, ge=1, le=100),
    db: AsyncSession = Depends(get_async_session),
) -> list[RecentVisit]:
    """Most recent visits, newest first."""
    return await visit_service.get_recent_visits(db, limit=limit)


@router.get("/stats/{bookmark_id}", response_model=BookmarkVisitStats)
async def get_bookmark_stats(
    bookmark_id: str,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkVisitStats:
    """Visit count, last visit and 7-day trend for a single bookmark."""
    stats = await visit_service.get_bookmark_stats(db, bookmark_id)
    if stats is None:
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return stats


@router.delete("/clear", response_model=SuccessResponse)
async def clear_visits(
    db: AsyncSession = Depends(get_async_session),
) -> SuccessResponse:
    """Delete all visit history and reset visit counts."""
    await visit_service.clear_visits(db)
    return SuccessResponse()
