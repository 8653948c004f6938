from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bragger.core.errors import NotFoundError
from bragger.database import get_db
from bragger.schemas.category import CategoryCreate, CategoryFilters, CategoryRead, CategoryUpdate
from bragger.schemas.common import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, ok, paginated
from bragger.services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
async def list_categories(
    search: str | None = Query(None),
    page: int = Query(DEFAULT_PAGE, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100, alias="pageSize"),
    include_stats: bool = Query(False, alias="includeStats"),
    db: AsyncSession = Depends(get_db),
):
    filters = CategoryFilters(search=search, page=page, page_size=page_size)
    service = CategoryService(db)
    if include_stats:
        page_ = await service.find_all_with_stats(filters)
        return paginated(page_, page_.data)
    page_ = await service.find_all(filters)
    return paginated(page_, [CategoryRead.model_validate(c) for c in page_.data])


@router.post("", status_code=201)
async def create_category(body: CategoryCreate, db: AsyncSession = Depends(get_db)):
    category = await CategoryService(db).create(body)
    return ok(CategoryRead.model_validate(category), "Category created successfully")


@router.get("/{category_id}")
async def get_category(category_id: str, db: AsyncSession = Depends(get_db)):
    category = await CategoryService(db).find_by_id(category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return ok(CategoryRead.model_validate(category))


@router.put("/{category_id}")
async def update_category(
    category_id: str, body: CategoryUpdate, db: AsyncSession = Depends(get_db)
):
    category = await CategoryService(db).update(category_id, body)
    return ok(CategoryRead.model_validate(category), "Category updated successfully")


@router.delete("/{category_id}")
async def delete_category(category_id: str, db: AsyncSession = Depends(get_db)):
    await CategoryService(db).delete(category_id)
    return ok(message="Category deleted successfully")
