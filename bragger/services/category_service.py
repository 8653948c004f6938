from __future__ import annotations

import logging
import re
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bragger.database import commit_or_conflict
from bragger.core.errors import ConflictError, NotFoundError, ValidationError
from bragger.models.achievement import Achievement
from bragger.models.base import as_uuid
from bragger.models.category import Category
from bragger.schemas.category import (
    CategoryCreate,
    CategoryFilters,
    CategoryUpdate,
    CategoryWithStats,
)
from bragger.schemas.common import Page

logger = logging.getLogger(__name__)

COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def _validate_color(color: str | None) -> None:
    if color is not None and not COLOR_RE.match(color):
        raise ValidationError("Invalid color format")


def _achievement_count():
    return (
        select(func.count(Achievement.id))
        .where(Achievement.category_id == Category.id)
        .correlate(Category)
        .scalar_subquery()
    )


class CategoryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: CategoryCreate) -> Category:
        if data.name is None:
            raise ValidationError("Category name is required")
        name = data.name.strip()
        if not name:
            raise ValidationError("Category name cannot be empty")
        _validate_color(data.color)
        if await self._find_by_name(name) is not None:
            raise ConflictError("Category name already exists")

        category = Category(name=name, color=data.color)
        self.db.add(category)
        await commit_or_conflict(self.db, "Category name already exists")
        logger.info("Category %s created (%s)", category.id, category.name)
        return category

    async def find_by_id(self, category_id: uuid.UUID | str) -> Category | None:
        cid = as_uuid(category_id)
        if cid is None:
            return None
        result = await self.db.execute(select(Category).where(Category.id == cid))
        return result.scalar_one_or_none()

    async def find_all(self, filters: CategoryFilters) -> Page:
        clauses = self._search_clauses(filters)
        total = await self.db.scalar(select(func.count(Category.id)).where(*clauses))
        result = await self.db.execute(
            select(Category)
            .where(*clauses)
            .order_by(Category.name)
            .offset(filters.offset)
            .limit(filters.page_size)
        )
        return Page.build(list(result.scalars().all()), total or 0, filters.page, filters.page_size)

    async def find_all_with_stats(self, filters: CategoryFilters) -> Page:
        clauses = self._search_clauses(filters)
        total = await self.db.scalar(select(func.count(Category.id)).where(*clauses))
        result = await self.db.execute(
            select(Category, _achievement_count().label("achievement_count"))
            .where(*clauses)
            .order_by(Category.name)
            .offset(filters.offset)
            .limit(filters.page_size)
        )
        rows = [
            CategoryWithStats(
                id=category.id,
                name=category.name,
                color=category.color,
                created_at=category.created_at,
                achievement_count=count,
            )
            for category, count in result.all()
        ]
        return Page.build(rows, total or 0, filters.page, filters.page_size)

    async def update(self, category_id: uuid.UUID | str, data: CategoryUpdate) -> Category:
        category = await self.find_by_id(category_id)
        if category is None:
            raise NotFoundError("Category not found")

        fields = data.model_fields_set
        if "name" in fields:
            name = (data.name or "").strip()
            if not name:
                raise ValidationError("Category name cannot be empty")
            if name != category.name:
                if await self._find_by_name(name) is not None:
                    raise ConflictError("Category name already exists")
                category.name = name
        if "color" in fields:
            _validate_color(data.color)
            category.color = data.color

        await commit_or_conflict(self.db, "Category name already exists")
        return category

    async def delete(self, category_id: uuid.UUID | str) -> None:
        category = await self.find_by_id(category_id)
        if category is None:
            raise NotFoundError("Category not found")

        in_use = await self.db.scalar(
            select(func.count(Achievement.id)).where(Achievement.category_id == category.id)
        )
        if in_use:
            raise ConflictError("Cannot delete category that is in use by achievements")

        await self.db.delete(category)
        await self.db.commit()
        logger.info("Category %s deleted", category.id)

    async def _find_by_name(self, name: str) -> Category | None:
        result = await self.db.execute(select(Category).where(Category.name == name))
        return result.scalar_one_or_none()

    @staticmethod
    def _search_clauses(filters: CategoryFilters) -> list:
        if filters.search and filters.search.strip():
            term = filters.search.strip().lower()
            return [func.lower(Category.name).contains(term, autoescape=True)]
        return []
