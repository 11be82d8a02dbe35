"""Bulk export and import endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session
from schemas.data import DataExport, DataImport, ImportResult
from services import data_service

router = APIRouter(prefix="/api", tags=["data"])


@router.get("/export", response_model=DataExport)
async def export_data(
    db: AsyncSession = Depends(get_async_session),
) -> DataExport:
    """Download every bookmark and category as a versioned JSON document."""
    return await data_service.export_data(db)


@router.post("/import", response_model=ImportResult)
async def import_data(
    data: DataImport,
    db: AsyncSession = Depends(get_async_session),
) -> ImportResult:
    """
    Replace all bookmarks, and categories when the document includes them.

    The output of `GET /api/export` (its `data` object) is accepted unchanged.
    """
    return await data_service.import_data(db, data)
