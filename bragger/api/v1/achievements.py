from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from bragger.api.deps import get_current_user_id
from bragger.config import settings
from bragger.core.errors import NotFoundError, ValidationError
from bragger.database import get_db
from bragger.schemas.achievement import (
    AchievementCreate,
    AchievementFilters,
    AchievementRead,
    AchievementUpdate,
)
from bragger.schemas.common import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, ok, paginated
from bragger.schemas.image import AchievementImageRead
from bragger.services.achievement_service import AchievementService
from bragger.services.image_service import ImageService, ImageUpload

router = APIRouter(prefix="/achievements", tags=["achievements"])

UPLOAD_CHUNK_SIZE = 64 * 1024


async def read_upload(upload: UploadFile, limit: int) -> bytes:
    """Read at most ``limit + 1`` bytes so oversized files are never fully buffered."""
    if upload.size is not None and upload.size > limit:
        raise ValidationError("File too large")
    chunks: list[bytes] = []
    received = 0
    while received <= limit:
        chunk = await upload.read(min(UPLOAD_CHUNK_SIZE, limit + 1 - received))
        if not chunk:
            break
        chunks.append(chunk)
        received += len(chunk)
    return b"".join(chunks)


def achievement_filters(
    search: str | None = Query(None),
    category_id: str | None = Query(None, alias="categoryId"),
    tags: list[str] | None = Query(None),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    status: str | None = Query(None),
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    page: int = Query(DEFAULT_PAGE, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100, alias="pageSize"),
) -> AchievementFilters:
    return AchievementFilters(
        search=search,
        category_id=category_id,
        tags=tags,
        start_date=start_date,
        end_date=end_date,
        status=status,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        page_size=page_size,
    )


@router.get("")
async def list_achievements(
    filters: AchievementFilters = Depends(achievement_filters),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    filters.user_id = user_id
    page = await AchievementService(db).find_all(filters)
    return paginated(page, [AchievementRead.model_validate(a) for a in page.data])


@router.post("", status_code=201)
async def create_achievement(
    body: AchievementCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    achievement = await AchievementService(db).create(user_id, body)
    return ok(AchievementRead.model_validate(achievement), "Achievement created successfully")


@router.get("/{achievement_id}")
async def get_achievement(
    achievement_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    achievement = await AchievementService(db).find_by_id(achievement_id, user_id)
    if achievement is None:
        raise NotFoundError("Achievement not found")
    return ok(AchievementRead.model_validate(achievement))


@router.put("/{achievement_id}")
async def update_achievement(
    achievement_id: str,
    body: AchievementUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    achievement = await AchievementService(db).update(achievement_id, user_id, body)
    return ok(AchievementRead.model_validate(achievement), "Achievement updated successfully")


@router.delete("/{achievement_id}")
async def delete_achievement(
    achievement_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await AchievementService(db).delete(achievement_id, user_id)
    return ok(message="Achievement deleted successfully")


@router.post("/{achievement_id}/images", status_code=201)
async def upload_images(
    achievement_id: str,
    images: list[UploadFile] | None = File(None),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    limit = settings.MAX_UPLOAD_MB * 1024 * 1024
    uploads = [
        ImageUpload(original_name=f.filename or "", content=await read_upload(f, limit))
        for f in images or []
    ]
    stored = await ImageService(db).add_images(achievement_id, user_id, uploads)
    return ok(
        [AchievementImageRead.model_validate(img) for img in stored],
        "Images uploaded successfully",
    )
