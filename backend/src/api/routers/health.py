"""Health check endpoint."""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session
from models.bookmark import Bookmark


logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response. bookmarks is None when the database is unreachable."""

    status: str
    database: str
    bookmarks: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: AsyncSession = Depends(get_async_session),
) -> HealthResponse:
    """Check application and database health."""
    try:
        count = (await db.execute(select(func.count()).select_from(Bookmark))).scalar_one()
    except Exception:
        logger.exception("Database health check failed")
        return HealthResponse(status="degraded", database="unhealthy")

    return HealthResponse(status="healthy", database="healthy", bookmarks=count)
