"""Category CRUD and reorder endpoints."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session
from schemas.bookmark import ReorderRequest, SuccessResponse
from schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from services import category_service

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=list[CategoryResponse])
async def list_categories(
    db: AsyncSession = Depends(get_async_session),
) -> list[CategoryResponse]:
    """List all categories in display order."""
    categories = await category_service.get_categories(db)
    return [CategoryResponse.model_validate(c) for c in categories]


@router.post("", response_model=CategoryResponse, status_code=201)
async def create_category(
    data: CategoryCreate,
    db: AsyncSession = Depends(get_async_session),
) -> CategoryResponse:
    """Create a category at the end of the order."""
    category = await category_service.create_category(db, data)
    return CategoryResponse.model_validate(category)


@router.patch("/reorder", response_model=SuccessResponse)
async def reorder_categories(
    data: ReorderRequest,
    db: AsyncSession = Depends(get_async_session),
) -> SuccessResponse:
    """Set orderIndex for a batch of categories."""
    await category_service.reorder_categories(db, data.items)
    return SuccessResponse()


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    data: CategoryUpdate,
    db: AsyncSession = Depends(get_async_session),
) -> CategoryResponse:
    """Partially update a category."""
    category = await category_service.update_category(db, category_id, data)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return CategoryResponse.model_validate(category)


@router.delete("/{category_id}", status_code=204)
async def delete_category(
    category_id: str,
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """Delete a category. Its bookmarks become uncategorized."""
    await category_service.delete_category(db, category_id)
