from __future__ import annotations

import uuid
from datetime import datetime

from bragger.schemas.common import CamelModel


class MilestoneCreate(CamelModel):
    title: str | None = None
    description: str | None = None
    due_date: str | None = None
    order: int = 0


class MilestoneUpdate(CamelModel):
    """Partial update; only fields present in the request body are applied."""

    title: str | None = None
    description: str | None = None
    due_date: str | None = None
    completed_at: str | None = None
    is_completed: bool | None = None
    order: int | None = None


class MilestoneRead(CamelModel):
    id: uuid.UUID
    achievement_id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: str | None = None
    due_date: datetime | None = None
    completed_at: datetime | None = None
    # Derived from completed_at on the model
    is_completed: bool
    order: int
    created_at: datetime
    updated_at: datetime
