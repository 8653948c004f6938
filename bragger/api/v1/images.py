from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from bragger.api.deps import get_current_user_id
from bragger.database import get_db
from bragger.schemas.common import ok
from bragger.services.image_service import ImageService

router = APIRouter(prefix="/images", tags=["images"])


@router.get("/{filename}")
async def serve_image(filename: str, db: AsyncSession = Depends(get_db)):
    path = ImageService(db).resolve_path(filename)
    return FileResponse(path)


@router.delete("/{image_id}")
async def delete_image(
    image_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await ImageService(db).delete_image(image_id, user_id)
    return ok(message="Image deleted successfully")
