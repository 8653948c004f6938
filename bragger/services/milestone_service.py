from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bragger.core.errors import NotFoundError, ValidationError
from bragger.models.achievement import Achievement
from bragger.models.base import as_uuid, utcnow
from bragger.models.milestone import Milestone
from bragger.schemas.milestone import MilestoneCreate, MilestoneUpdate
from bragger.services.dates import parse_datetime

logger = logging.getLogger(__name__)


def _optional_date(value: str | None, message: str):
    if value is None or value == "":
        return None
    parsed = parse_datetime(value)
    if parsed is None:
        raise ValidationError(message)
    return parsed


class MilestoneService:
    """Milestones of achievements owned by the calling user."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_achievement(
        self, achievement_id: uuid.UUID | str, user_id: uuid.UUID
    ) -> list[Milestone]:
        achievement = await self._owned_achievement(achievement_id, user_id)
        result = await self.db.execute(
            select(Milestone)
            .where(Milestone.achievement_id == achievement.id, Milestone.user_id == user_id)
            .order_by(Milestone.order.asc(), Milestone.created_at.asc())
        )
        return list(result.scalars().all())

    async def create(
        self, achievement_id: uuid.UUID | str, user_id: uuid.UUID, data: MilestoneCreate
    ) -> Milestone:
        achievement = await self._owned_achievement(achievement_id, user_id)
        if data.title is None or not data.title.strip():
            raise ValidationError("Title is required")

        milestone = Milestone(
            achievement_id=achievement.id,
            user_id=user_id,
            title=data.title,
            description=data.description,
            due_date=_optional_date(data.due_date, "Invalid due date format"),
            order=data.order,
        )
        self.db.add(milestone)
        await self.db.commit()
        logger.info("Milestone %s added to achievement %s", milestone.id, achievement.id)
        return milestone

    async def update(
        self,
        achievement_id: uuid.UUID | str,
        milestone_id: uuid.UUID | str,
        user_id: uuid.UUID,
        data: MilestoneUpdate,
    ) -> Milestone:
        milestone = await self._owned_milestone(achievement_id, milestone_id, user_id)
        fields = data.model_fields_set

        if "title" in fields:
            if data.title is None or not data.title.strip():
                raise ValidationError("Title cannot be empty")
            milestone.title = data.title
        if "description" in fields:
            milestone.description = data.description
        if "order" in fields and data.order is not None:
            milestone.order = data.order
        if "due_date" in fields:
            milestone.due_date = _optional_date(data.due_date, "Invalid due date format")

        if "is_completed" in fields:
            milestone.completed_at = utcnow() if data.is_completed else None
        # An explicit completion timestamp takes precedence over the flag
        if "completed_at" in fields:
            milestone.completed_at = _optional_date(
                data.completed_at, "Invalid completed date format"
            )

        await self.db.commit()
        return milestone

    async def delete(
        self,
        achievement_id: uuid.UUID | str,
        milestone_id: uuid.UUID | str,
        user_id: uuid.UUID,
    ) -> None:
        milestone = await self._owned_milestone(achievement_id, milestone_id, user_id)
        await self.db.delete(milestone)
        await self.db.commit()

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

    async def _owned_milestone(
        self,
        achievement_id: uuid.UUID | str,
        milestone_id: uuid.UUID | str,
        user_id: uuid.UUID,
    ) -> Milestone:
        aid = as_uuid(achievement_id)
        mid = as_uuid(milestone_id)
        milestone = None
        if aid is not None and mid is not None:
            result = await self.db.execute(
                select(Milestone).where(
                    Milestone.id == mid,
                    Milestone.achievement_id == aid,
                    Milestone.user_id == user_id,
                )
            )
            milestone = result.scalar_one_or_none()
        if milestone is None:
            raise NotFoundError("Milestone not found")
        return milestone
