from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import false, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bragger.core.errors import NotFoundError, ValidationError
from bragger.core.metrics import achievements_written_total
from bragger.models.achievement import ACHIEVEMENT_STATUSES, Achievement
from bragger.models.base import as_uuid, utcnow
from bragger.models.category import Category
from bragger.models.tag import AchievementTag, Tag
from bragger.schemas.achievement import AchievementCreate, AchievementFilters, AchievementUpdate
from bragger.schemas.common import Page
from bragger.services.dates import as_utc, parse_datetime
from bragger.services.image_service import remove_stored_files
from bragger.services.tag_service import TagService, normalize_tag_names

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "title": Achievement.title,
    "startDate": Achievement.start_date,
    "endDate": Achievement.end_date,
    "createdAt": Achievement.created_at,
    "updatedAt": Achievement.updated_at,
    "status": Achievement.status,
}
DEFAULT_SORT_FIELD = "createdAt"
DEFAULT_SORT_ORDER = "desc"


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _parse_filter_date(value: str, message: str) -> datetime:
    parsed = parse_datetime(value)
    if parsed is None:
        raise ValidationError(message)
    return parsed


def build_achievement_filters(filters: AchievementFilters) -> list[Any]:
    """Translate list filters into WHERE clauses, all of which must hold."""
    clauses: list[Any] = []

    if filters.user_id is not None:
        clauses.append(Achievement.user_id == filters.user_id)

    if filters.search and filters.search.strip():
        term = filters.search.strip().lower()
        clauses.append(
            or_(
                func.lower(Achievement.title).contains(term, autoescape=True),
                func.lower(Achievement.description).contains(term, autoescape=True),
            )
        )

    if filters.category_id:
        category_id = as_uuid(filters.category_id)
        clauses.append(Achievement.category_id == category_id if category_id else false())

    if filters.status:
        if filters.status not in ACHIEVEMENT_STATUSES:
            raise ValidationError("Invalid status value")
        clauses.append(Achievement.status == filters.status)

    tag_names = normalize_tag_names(filters.tags)
    if tag_names:
        clauses.append(
            Achievement.id.in_(
                select(AchievementTag.achievement_id)
                .join(Tag, Tag.id == AchievementTag.tag_id)
                .where(Tag.name.in_(tag_names))
            )
        )

    if filters.start_date:
        start = _parse_filter_date(filters.start_date, "Invalid start date format")
        clauses.append(Achievement.start_date >= start)
    if filters.end_date:
        end = _parse_filter_date(filters.end_date, "Invalid end date format")
        clauses.append(Achievement.start_date <= end)

    return clauses


def build_achievement_order(filters: AchievementFilters) -> list[Any]:
    sort_by = filters.sort_by or DEFAULT_SORT_FIELD
    sort_order = (filters.sort_order or DEFAULT_SORT_ORDER).lower()
    column = SORT_COLUMNS.get(sort_by)
    if column is None:
        raise ValidationError("Invalid sort field")
    if sort_order not in ("asc", "desc"):
        raise ValidationError("Invalid sort order")
    primary = column.asc() if sort_order == "asc" else column.desc()
    return [primary, Achievement.id]


def validate_create_data(data: AchievementCreate) -> tuple[datetime, datetime | None]:
    """Check a create payload; returns the parsed start and end dates."""
    if _blank(data.title):
        raise ValidationError("Title is required")
    if _blank(data.description):
        raise ValidationError("Description is required")
    if _blank(data.start_date):
        raise ValidationError("Start date is required")

    start_date = parse_datetime(data.start_date)
    if start_date is None:
        raise ValidationError("Invalid start date format")

    end_date = None
    if data.end_date:
        end_date = parse_datetime(data.end_date)
        if end_date is None:
            raise ValidationError("Invalid end date format")
        if end_date <= start_date:
            raise ValidationError("End date must be after start date")

    if _blank(data.category_id):
        raise ValidationError("Category ID is required")
    if data.status is None:
        raise ValidationError("Status is required")
    if data.status not in ACHIEVEMENT_STATUSES:
        raise ValidationError("Invalid status value")
    if data.duration_hours is not None and data.duration_hours < 0:
        raise ValidationError("Duration hours must be non-negative")

    return start_date, end_date


def validate_update_data(data: AchievementUpdate) -> dict[str, Any]:
    """Check the fields present in an update payload.

    Returns the column values to assign, with dates already parsed.
    """
    fields = data.model_fields_set
    values: dict[str, Any] = {}

    if "title" in fields:
        if _blank(data.title):
            raise ValidationError("Title cannot be empty")
        values["title"] = data.title
    if "description" in fields:
        if _blank(data.description):
            raise ValidationError("Description cannot be empty")
        values["description"] = data.description

    if "start_date" in fields:
        start_date = parse_datetime(data.start_date)
        if start_date is None:
            raise ValidationError("Invalid start date format")
        values["start_date"] = start_date
    if "end_date" in fields:
        if data.end_date:
            end_date = parse_datetime(data.end_date)
            if end_date is None:
                raise ValidationError("Invalid end date format")
            values["end_date"] = end_date
        else:
            values["end_date"] = None
    if values.get("start_date") and values.get("end_date"):
        if values["end_date"] <= values["start_date"]:
            raise ValidationError("End date must be after start date")

    if "category_id" in fields:
        if _blank(data.category_id):
            raise ValidationError("Category ID cannot be empty")
        values["category_id"] = data.category_id
    if "status" in fields:
        if data.status not in ACHIEVEMENT_STATUSES:
            raise ValidationError("Invalid status value")
        values["status"] = data.status
    if "duration_hours" in fields:
        if data.duration_hours is not None and data.duration_hours < 0:
            raise ValidationError("Duration hours must be non-negative")
        values["duration_hours"] = data.duration_hours

    if "impact" in fields:
        values["impact"] = data.impact or None
    if "skills_used" in fields:
        values["skills_used"] = list(data.skills_used or [])
    if "github_url" in fields:
        values["github_url"] = data.github_url or None

    return values


class AchievementService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.tags = TagService(db)

    async def create(self, user_id: uuid.UUID, data: AchievementCreate) -> Achievement:
        start_date, end_date = validate_create_data(data)
        category = await self._require_category(data.category_id)

        try:
            tags = await self.tags.find_or_create_by_names(data.tags, commit=False)
            achievement = Achievement(
                user_id=user_id,
                title=data.title,
                description=data.description,
                start_date=start_date,
                end_date=end_date,
                duration_hours=data.duration_hours,
                category_id=category.id,
                impact=data.impact or None,
                skills_used=list(data.skills_used or []),
                status=data.status,
                github_url=data.github_url or None,
                tag_links=[AchievementTag(tag_id=tag.id) for tag in tags],
            )
            self.db.add(achievement)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        achievements_written_total.labels(operation="create").inc()
        logger.info("Achievement %s created for user %s", achievement.id, user_id)
        return await self._load(achievement.id)

    async def find_by_id(
        self, achievement_id: uuid.UUID | str, user_id: uuid.UUID | None = None
    ) -> Achievement | None:
        aid = as_uuid(achievement_id)
        if aid is None:
            return None
        stmt = (
            select(Achievement)
            .where(Achievement.id == aid)
            .execution_options(populate_existing=True)
        )
        if user_id is not None:
            stmt = stmt.where(Achievement.user_id == user_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def find_all(self, filters: AchievementFilters) -> Page:
        clauses = build_achievement_filters(filters)
        order = build_achievement_order(filters)

        total = await self.db.scalar(select(func.count(Achievement.id)).where(*clauses))
        result = await self.db.execute(
            select(Achievement)
            .where(*clauses)
            .order_by(*order)
            .execution_options(populate_existing=True)
            .offset((filters.page - 1) * filters.page_size)
            .limit(filters.page_size)
        )
        return Page.build(list(result.scalars().all()), total or 0, filters.page, filters.page_size)

    async def update(
        self, achievement_id: uuid.UUID | str, user_id: uuid.UUID, data: AchievementUpdate
    ) -> Achievement:
        achievement = await self.find_by_id(achievement_id, user_id)
        if achievement is None:
            raise NotFoundError("Achievement not found")

        values = validate_update_data(data)

        start_date = values.get("start_date", as_utc(achievement.start_date))
        end_date = values["end_date"] if "end_date" in values else as_utc(achievement.end_date)
        if end_date is not None and end_date <= start_date:
            raise ValidationError("End date must be after start date")

        if "category_id" in values:
            category_id = as_uuid(values["category_id"])
            if category_id != achievement.category_id:
                category = await self._require_category(values["category_id"])
                values["category_id"] = category.id
            else:
                values["category_id"] = category_id

        try:
            for field, value in values.items():
                setattr(achievement, field, value)

            if "tags" in data.model_fields_set and data.tags is not None:
                tags = await self.tags.find_or_create_by_names(data.tags, commit=False)
                achievement.tag_links.clear()
                await self.db.flush()
                achievement.tag_links.extend(AchievementTag(tag_id=tag.id) for tag in tags)

            # Touch the row even when only the tag set changed
            achievement.updated_at = utcnow()
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        achievements_written_total.labels(operation="update").inc()
        return await self._load(achievement.id)

    async def delete(self, achievement_id: uuid.UUID | str, user_id: uuid.UUID) -> None:
        achievement = await self.find_by_id(achievement_id, user_id)
        if achievement is None:
            raise NotFoundError("Achievement not found")

        stored_files = [image.file_path for image in achievement.images]
        await self.db.delete(achievement)
        await self.db.commit()
        remove_stored_files(stored_files)

        achievements_written_total.labels(operation="delete").inc()
        logger.info("Achievement %s deleted by user %s", achievement.id, user_id)

    async def _require_category(self, category_id: uuid.UUID | str | None) -> Category:
        cid = as_uuid(category_id)
        category = await self.db.get(Category, cid) if cid is not None else None
        if category is None:
            raise NotFoundError("Category not found")
        return category

    async def _load(self, achievement_id: uuid.UUID) -> Achievement:
        result = await self.db.execute(
            select(Achievement)
            .where(Achievement.id == achievement_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()
