"""Achievement image storage.

Uploads are sniffed by content (the client-supplied content type is ignored),
written under ``UPLOAD_DIR`` with a random name, and recorded as
``AchievementImage`` rows.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

import filetype
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bragger.config import settings
from bragger.core.errors import NotFoundError, ValidationError
from bragger.core.metrics import images_uploaded_bytes_total
from bragger.models.achievement import Achievement
from bragger.models.base import as_uuid
from bragger.models.image import AchievementImage

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


@dataclass
class ImageUpload:
    original_name: str
    content: bytes


def sniff_image(content: bytes, *, max_mb: int) -> tuple[str, str]:
    """Return ``(mime_type, extension)`` for an acceptable image upload."""
    if len(content) > max_mb * 1024 * 1024:
        raise ValidationError("File too large")
    kind = filetype.guess(content) if content else None
    if kind is None or kind.mime not in ALLOWED_MIME_TYPES:
        raise ValidationError("Invalid image file")
    return kind.mime, kind.extension


def remove_stored_files(paths: list[str]) -> None:
    for path in paths:
        try:
            Path(path).unlink(missing_ok=True)
        except OSError:
            logger.warning("Could not remove stored image %s", path, exc_info=True)


class ImageService:
    def __init__(self, db: AsyncSession, upload_dir: str | Path | None = None):
        self.db = db
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)

    async def add_images(
        self,
        achievement_id: uuid.UUID | str,
        user_id: uuid.UUID,
        uploads: list[ImageUpload],
    ) -> list[AchievementImage]:
        if not uploads:
            raise ValidationError("No images provided")
        if len(uploads) > settings.MAX_UPLOAD_FILES:
            raise ValidationError(f"Too many images (max {settings.MAX_UPLOAD_FILES})")

        achievement = await self._owned_achievement(achievement_id, user_id)

        # Validate the whole batch before anything touches the disk
        sniffed = [sniff_image(u.content, max_mb=settings.MAX_UPLOAD_MB) for u in uploads]

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        images: list[AchievementImage] = []
        written: list[str] = []
        try:
            for upload, (mime_type, extension) in zip(uploads, sniffed):
                filename = f"{uuid.uuid4().hex}.{extension}"
                path = self.upload_dir / filename
                await asyncio.to_thread(path.write_bytes, upload.content)
                written.append(str(path))
                images.append(
                    AchievementImage(
                        achievement_id=achievement.id,
                        filename=filename,
                        original_name=upload.original_name or filename,
                        file_path=str(path),
                        file_size=len(upload.content),
                        mime_type=mime_type,
                    )
                )
            self.db.add_all(images)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            remove_stored_files(written)
            raise

        images_uploaded_bytes_total.inc(sum(img.file_size for img in images))
        logger.info("Stored %d images for achievement %s", len(images), achievement.id)
        return images

    async def delete_image(self, image_id: uuid.UUID | str, user_id: uuid.UUID) -> None:
        iid = as_uuid(image_id)
        image = None
        if iid is not None:
            result = await self.db.execute(
                select(AchievementImage)
                .join(Achievement, Achievement.id == AchievementImage.achievement_id)
                .where(AchievementImage.id == iid, Achievement.user_id == user_id)
            )
            image = result.scalar_one_or_none()
        if image is None:
            raise NotFoundError("Image not found")

        path = image.file_path
        await self.db.delete(image)
        await self.db.commit()
        remove_stored_files([path])

    def resolve_path(self, filename: str) -> Path:
        """Map a stored filename to its path; rejects anything but a bare name."""
        if not filename or "/" in filename or "\\" in filename or filename in {".", ".."}:
            raise NotFoundError("Image not found")
        path = self.upload_dir / filename
        if not path.is_file():
            raise NotFoundError("Image not found")
        return path

    async def _owned_achievement(
        self, achievement_id: uuid.UUID | str, user_id: uuid.UUID
    ) -> Achievement:
        aid = as_uuid(achievement_id)
        achievement = None
        if aid is not None:
            result = await self.db.execute(
                select(Achievement).where(Achievement.id == aid, Achievement.user_id == user_id)
            )
            achievement = result.scalar_one_or_none()
        if achievement is None:
            raise NotFoundError("Achievement not found")
        return achievement
