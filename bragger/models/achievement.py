from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bragger.models.base import Base, TimestampMixin, UUIDMixin
from bragger.models.image import AchievementImage
from bragger.models.milestone import Milestone


class AchievementStatus(str, enum.Enum):
    IDEA = "idea"
    CONCEPT = "concept"
    USABLE = "usable"
    COMPLETE = "complete"


ACHIEVEMENT_STATUSES = tuple(s.value for s in AchievementStatus)


class Achievement(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "achievements"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    duration_hours: Mapped[float | None] = mapped_column(Float)
    category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    impact: Mapped[str | None] = mapped_column(Text)
    skills_used: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=AchievementStatus.IDEA.value, index=True
    )
    github_url: Mapped[str | None] = mapped_column(String(500))

    category = relationship("Category", lazy="selectin")
    tag_links = relationship("AchievementTag", lazy="selectin", cascade="all, delete-orphan")
    tags = relationship(
        "Tag", secondary="achievement_tags", lazy="selectin", viewonly=True, order_by="Tag.name"
    )
    images = relationship(
        "AchievementImage",
        back_populates="achievement",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by=AchievementImage.created_at,
    )
    milestones = relationship(
        "Milestone",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by=[Milestone.order, Milestone.created_at],
    )
