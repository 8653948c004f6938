from __future__ import annotations

import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bragger.database import commit_or_conflict
from bragger.core.errors import ConflictError, NotFoundError, ValidationError
from bragger.models.base import as_uuid
from bragger.models.tag import AchievementTag, Tag
from bragger.schemas.common import Page
from bragger.schemas.tag import TagCreate, TagFilters, TagUpdate, TagWithStats

logger = logging.getLogger(__name__)


def normalize_tag_names(names: list[str] | None) -> list[str]:
    """Lowercase, strip and de-duplicate tag names, keeping first-seen order."""
    seen: dict[str, None] = {}
    for name in names or []:
        if not isinstance(name, str):
            continue
        cleaned = name.strip().lower()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


def _usage_count():
    return (
        select(func.count())
        .select_from(AchievementTag)
        .where(AchievementTag.tag_id == Tag.id)
        .correlate(Tag)
        .scalar_subquery()
    )


class TagService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: TagCreate) -> Tag:
        if data.name is None:
            raise ValidationError("Tag name is required")
        name = data.name.strip().lower()
        if not name:
            raise ValidationError("Tag name cannot be empty")
        if await self._find_by_name(name) is not None:
            raise ConflictError("Tag name already exists")

        tag = Tag(name=name)
        self.db.add(tag)
        await commit_or_conflict(self.db, "Tag name already exists")
        logger.info("Tag %s created (%s)", tag.id, tag.name)
        return tag

    async def find_by_id(self, tag_id: uuid.UUID | str) -> Tag | None:
        tid = as_uuid(tag_id)
        if tid is None:
            return None
        result = await self.db.execute(select(Tag).where(Tag.id == tid))
        return result.scalar_one_or_none()

    async def find_all(self, filters: TagFilters) -> Page:
        clauses = self._search_clauses(filters)
        total = await self.db.scalar(select(func.count(Tag.id)).where(*clauses))
        result = await self.db.execute(
            select(Tag)
            .where(*clauses)
            .order_by(Tag.name)
            .offset(filters.offset)
            .limit(filters.page_size)
        )
        return Page.build(list(result.scalars().all()), total or 0, filters.page, filters.page_size)

    async def find_all_with_stats(self, filters: TagFilters) -> Page:
        clauses = self._search_clauses(filters)
        total = await self.db.scalar(select(func.count(Tag.id)).where(*clauses))
        result = await self.db.execute(
            select(Tag, _usage_count().label("usage_count"))
            .where(*clauses)
            .order_by(Tag.name)
            .offset(filters.offset)
            .limit(filters.page_size)
        )
        rows = [
            TagWithStats(id=tag.id, name=tag.name, created_at=tag.created_at, usage_count=count)
            for tag, count in result.all()
        ]
        return Page.build(rows, total or 0, filters.page, filters.page_size)

    async def update(self, tag_id: uuid.UUID | str, data: TagUpdate) -> Tag:
        tag = await self.find_by_id(tag_id)
        if tag is None:
            raise NotFoundError("Tag not found")

        if "name" in data.model_fields_set:
            name = (data.name or "").strip().lower()
            if not name:
                raise ValidationError("Tag name cannot be empty")
            if name != tag.name:
                if await self._find_by_name(name) is not None:
                    raise ConflictError("Tag name already exists")
                tag.name = name

        await commit_or_conflict(self.db, "Tag name already exists")
        return tag

    async def delete(self, tag_id: uuid.UUID | str) -> None:
        tag = await self.find_by_id(tag_id)
        if tag is None:
            raise NotFoundError("Tag not found")

        in_use = await self.db.scalar(
            select(func.count()).select_from(AchievementTag).where(AchievementTag.tag_id == tag.id)
        )
        if in_use:
            raise ConflictError("Cannot delete tag that is in use by achievements")

        await self.db.delete(tag)
        await self.db.commit()
        logger.info("Tag %s deleted", tag.id)

    async def find_by_names(self, names: list[str]) -> list[Tag]:
        normalized = normalize_tag_names(names)
        if not normalized:
            return []
        result = await self.db.execute(select(Tag).where(Tag.name.in_(normalized)))
        return list(result.scalars().all())

    async def find_or_create_by_names(self, names: list[str], *, commit: bool = True) -> list[Tag]:
        """Resolve names to Tag rows, inserting the ones that do not exist yet.

        With ``commit=False`` the new tags are only flushed so the caller can
        finish its own unit of work (or roll it back) around them.
        """
        normalized = normalize_tag_names(names)
        if not normalized:
            return []

        existing = {tag.name: tag for tag in await self.find_by_names(normalized)}
        missing = [Tag(name=name) for name in normalized if name not in existing]
        if missing:
            self.db.add_all(missing)
            await self.db.flush()
            existing.update({tag.name: tag for tag in missing})
            logger.debug("Created %d new tags: %s", len(missing), [t.name for t in missing])

        if commit:
            await self.db.commit()
        return [existing[name] for name in normalized]

    async def _find_by_name(self, name: str) -> Tag | None:
        result = await self.db.execute(select(Tag).where(Tag.name == name))
        return result.scalar_one_or_none()

    @staticmethod
    def _search_clauses(filters: TagFilters) -> list:
        if filters.search and filters.search.strip():
            term = filters.search.strip().lower()
            return [func.lower(Tag.name).contains(term, autoescape=True)]
        return []
