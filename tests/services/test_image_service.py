"""Tests for ImageService: content sniffing, storage on disk and cleanup."""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy import func, select

from bragger.config import settings
from bragger.core.errors import NotFoundError, ValidationError
from bragger.models.image import AchievementImage
from bragger.services.achievement_service import AchievementService
from bragger.services.image_service import ImageService, ImageUpload, sniff_image
from tests.conftest import (
    GIF_BYTES,
    PNG_BYTES,
    create_achievement,
    create_category,
    create_user,
)


@pytest.fixture
async def owned(db):
    user = await create_user(db)
    category = await create_category(db)
    achievement = await create_achievement(db, user=user, category=category)
    return user, achievement


class TestSniffImage:
    def test_png(self):
        assert sniff_image(PNG_BYTES, max_mb=5) == ("image/png", "png")

    def test_gif(self):
        assert sniff_image(GIF_BYTES, max_mb=5)[0] == "image/gif"

    @pytest.mark.parametrize("content", [b"", b"%PDF-1.7 not an image", b"hello world"])
    def test_rejects_non_images(self, content):
        with pytest.raises(ValidationError, match="Invalid image file"):
            sniff_image(content, max_mb=5)

    def test_rejects_oversized(self):
        with pytest.raises(ValidationError, match="File too large"):
            sniff_image(PNG_BYTES + b"\x00" * (1024 * 1024), max_mb=1)


class TestAddImages:
    async def test_stores_files_and_rows(self, db, owned, upload_dir):
        user, achievement = owned
        images = await ImageService(db).add_images(
            achievement.id,
            user.id,
            [ImageUpload("shot.png", PNG_BYTES), ImageUpload("anim.gif", GIF_BYTES)],
        )

        assert [img.mime_type for img in images] == ["image/png", "image/gif"]
        assert images[0].original_name == "shot.png"
        assert images[0].file_size == len(PNG_BYTES)
        assert images[0].filename.endswith(".png")
        for img in images:
            assert (upload_dir / img.filename).read_bytes() in (PNG_BYTES, GIF_BYTES)

    async def test_invalid_file_in_batch_writes_nothing(self, db, owned, upload_dir):
        user, achievement = owned
        with pytest.raises(ValidationError, match="Invalid image file"):
            await ImageService(db).add_images(
                achievement.id,
                user.id,
                [ImageUpload("ok.png", PNG_BYTES), ImageUpload("evil.png", b"<?php ?>")],
            )
        assert list(upload_dir.iterdir()) == []
        assert await db.scalar(select(func.count(AchievementImage.id))) == 0

    async def test_no_images(self, db, owned, upload_dir):
        user, achievement = owned
        with pytest.raises(ValidationError, match="No images provided"):
            await ImageService(db).add_images(achievement.id, user.id, [])

    async def test_too_many_images(self, db, owned, upload_dir):
        user, achievement = owned
        uploads = [ImageUpload(f"{i}.png", PNG_BYTES) for i in range(settings.MAX_UPLOAD_FILES + 1)]
        with pytest.raises(ValidationError, match="Too many images"):
            await ImageService(db).add_images(achievement.id, user.id, uploads)

    async def test_foreign_achievement(self, db, owned, upload_dir):
        _, achievement = owned
        stranger = await create_user(db)
        with pytest.raises(NotFoundError, match="Achievement not found"):
            await ImageService(db).add_images(
                achievement.id, stranger.id, [ImageUpload("a.png", PNG_BYTES)]
            )


class TestDeleteImage:
    async def test_removes_row_and_file(self, db, owned, upload_dir):
        user, achievement = owned
        service = ImageService(db)
        [image] = await service.add_images(
            achievement.id, user.id, [ImageUpload("a.png", PNG_BYTES)]
        )

        await service.delete_image(image.id, user.id)

        assert not (upload_dir / image.filename).exists()
        assert await db.scalar(select(func.count(AchievementImage.id))) == 0

    async def test_not_owner(self, db, owned, upload_dir):
        user, achievement = owned
        stranger = await create_user(db)
        service = ImageService(db)
        [image] = await service.add_images(
            achievement.id, user.id, [ImageUpload("a.png", PNG_BYTES)]
        )
        with pytest.raises(NotFoundError, match="Image not found"):
            await service.delete_image(image.id, stranger.id)
        assert (upload_dir / image.filename).exists()

    async def test_unknown_id(self, db, owned, upload_dir):
        user, _ = owned
        with pytest.raises(NotFoundError, match="Image not found"):
            await ImageService(db).delete_image(uuid.uuid4(), user.id)

    async def test_achievement_delete_removes_files(self, db, owned, upload_dir):
        user, achievement = owned
        [image] = await ImageService(db).add_images(
            achievement.id, user.id, [ImageUpload("a.png", PNG_BYTES)]
        )
        await AchievementService(db).delete(achievement.id, user.id)
        assert not (upload_dir / image.filename).exists()


class TestResolvePath:
    async def test_existing_file(self, db, upload_dir):
        (upload_dir / "abc.png").write_bytes(PNG_BYTES)
        assert ImageService(db).resolve_path("abc.png") == upload_dir / "abc.png"

    @pytest.mark.parametrize("filename", ["missing.png", "../secret", "..", "a\\b.png"])
    async def test_rejects(self, db, upload_dir, filename):
        with pytest.raises(NotFoundError, match="Image not found"):
            ImageService(db).resolve_path(filename)
