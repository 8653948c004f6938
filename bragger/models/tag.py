from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bragger.models.base import Base, CreatedAtMixin, UUIDMixin


class Tag(Base, UUIDMixin, CreatedAtMixin):
    __tablename__ = "tags"

    # Always stored lowercase
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)


class AchievementTag(Base):
    __tablename__ = "achievement_tags"

    achievement_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("achievements.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True, index=True
    )

    tag = relationship("Tag", lazy="selectin")
