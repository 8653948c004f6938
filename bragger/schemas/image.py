from __future__ import annotations

import uuid
from datetime import datetime

from bragger.schemas.common import CamelModel


class AchievementImageRead(CamelModel):
    id: uuid.UUID
    achievement_id: uuid.UUID
    filename: str
    original_name: str
    file_path: str
    file_size: int
    mime_type: str
    created_at: datetime
