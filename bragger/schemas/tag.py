from __future__ import annotations

import uuid
from datetime import datetime

from bragger.schemas.common import CamelModel, ListFilters


class TagCreate(CamelModel):
    name: str | None = None


class TagUpdate(CamelModel):
    name: str | None = None


class TagRead(CamelModel):
    id: uuid.UUID
    name: str
    created_at: datetime


class TagWithStats(TagRead):
    usage_count: int = 0


class TagFilters(ListFilters):
    pass
