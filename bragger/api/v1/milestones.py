from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bragger.api.deps import get_current_user_id
from bragger.database import get_db
from bragger.schemas.common import ok
from bragger.schemas.milestone import MilestoneCreate, MilestoneRead, MilestoneUpdate
from bragger.services.milestone_service import MilestoneService

router = APIRouter(prefix="/achievements/{achievement_id}/milestones", tags=["milestones"])


@router.get("")
async def list_milestones(
    achievement_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    milestones = await MilestoneService(db).list_for_achievement(achievement_id, user_id)
    return ok([MilestoneRead.model_validate(m) for m in milestones])


@router.post("", status_code=201)
async def create_milestone(
    achievement_id: str,
    body: MilestoneCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    milestone = await MilestoneService(db).create(achievement_id, user_id, body)
    return ok(MilestoneRead.model_validate(milestone), "Milestone created successfully")


@router.put("/{milestone_id}")
async def update_milestone(
    achievement_id: str,
    milestone_id: str,
    body: MilestoneUpdate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    milestone = await MilestoneService(db).update(achievement_id, milestone_id, user_id, body)
    return ok(MilestoneRead.model_validate(milestone), "Milestone updated successfully")


@router.delete("/{milestone_id}")
async def delete_milestone(
    achievement_id: str,
    milestone_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    await MilestoneService(db).delete(achievement_id, milestone_id, user_id)
    return ok(message="Milestone deleted successfully")
