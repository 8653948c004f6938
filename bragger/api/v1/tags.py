from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bragger.core.errors import NotFoundError
from bragger.database import get_db
from bragger.schemas.common import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, ok, paginated
from bragger.schemas.tag import TagCreate, TagFilters, TagRead, TagUpdate
from bragger.services.tag_service import TagService

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("")
async def list_tags(
    search: str | None = Query(None),
    page: int = Query(DEFAULT_PAGE, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100, alias="pageSize"),
    include_stats: bool = Query(False, alias="includeStats"),
    db: AsyncSession = Depends(get_db),
):
    filters = TagFilters(search=search, page=page, page_size=page_size)
    service = TagService(db)
    if include_stats:
        page_ = await service.find_all_with_stats(filters)
        return paginated(page_, page_.data)
    page_ = await service.find_all(filters)
    return paginated(page_, [TagRead.model_validate(t) for t in page_.data])


@router.post("", status_code=201)
async def create_tag(body: TagCreate, db: AsyncSession = Depends(get_db)):
    tag = await TagService(db).create(body)
    return ok(TagRead.model_validate(tag), "Tag created successfully")


@router.get("/{tag_id}")
async def get_tag(tag_id: str, db: AsyncSession = Depends(get_db)):
    tag = await TagService(db).find_by_id(tag_id)
    if tag is None:
        raise NotFoundError("Tag not found")
    return ok(TagRead.model_validate(tag))


@router.put("/{tag_id}")
async def update_tag(tag_id: str, body: TagUpdate, db: AsyncSession = Depends(get_db)):
    tag = await TagService(db).update(tag_id, body)
    return ok(TagRead.model_validate(tag), "Tag updated successfully")


@router.delete("/{tag_id}")
async def delete_tag(tag_id: str, db: AsyncSession = Depends(get_db)):
    await TagService(db).delete(tag_id)
    return ok(message="Tag deleted successfully")
