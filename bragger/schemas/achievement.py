from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import Field

from bragger.schemas.category import CategoryRead
from bragger.schemas.common import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, CamelModel
from bragger.schemas.image import AchievementImageRead
from bragger.schemas.milestone import MilestoneRead
from bragger.schemas.tag import TagRead


class AchievementCreate(CamelModel):
    # Required-ness is enforced by AchievementService so that missing fields
    # produce the same messages as empty ones.
    title: str | None = None
    description: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    duration_hours: float | None = None
    category_id: str | None = None
    impact: str | None = None
    skills_used: list[str] = Field(default_factory=list)
    status: str | None = None
    github_url: str | None = None
    tags: list[str] = Field(default_factory=list)


class AchievementUpdate(CamelModel):
    """Partial update; only fields present in the request body are applied."""

    title: str | None = None
    description: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    duration_hours: float | None = None
    category_id: str | None = None
    impact: str | None = None
    skills_used: list[str] | None = None
    status: str | None = None
    github_url: str | None = None
    tags: list[str] | None = None


class AchievementRead(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: str
    start_date: datetime
    end_date: datetime | None = None
    duration_hours: float | None = None
    category_id: uuid.UUID
    impact: str | None = None
    skills_used: list[str] = Field(default_factory=list)
    status: str
    github_url: str | None = None
    created_at: datetime
    updated_at: datetime
    category: CategoryRead | None = None
    tags: list[TagRead] = Field(default_factory=list)
    images: list[AchievementImageRead] = Field(default_factory=list)
    milestones: list[MilestoneRead] = Field(default_factory=list)


class AchievementFilters(CamelModel):
    search: str | None = None
    category_id: str | None = None
    tags: list[str] | None = None
    start_date: str | None = None
    end_date: str | None = None
    status: str | None = None
    sort_by: str | None = None
    sort_order: str | None = None
    page: int = Field(DEFAULT_PAGE, ge=1)
    page_size: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=100)
    # Set from the authenticated request, never from the query string
    user_id: uuid.UUID | None = Field(None, exclude=True)
