from __future__ import annotations

import uuid
from datetime import datetime

from bragger.schemas.common import CamelModel, ListFilters


class CategoryCreate(CamelModel):
    name: str | None = None
    color: str | None = None


class CategoryUpdate(CamelModel):
    name: str | None = None
    color: str | None = None


class CategoryRead(CamelModel):
    id: uuid.UUID
    name: str
    color: str | None = None
    created_at: datetime


class CategoryWithStats(CategoryRead):
    achievement_count: int = 0


class CategoryFilters(ListFilters):
    pass
