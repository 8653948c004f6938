from bragger.models.achievement import Achievement, AchievementStatus
from bragger.models.base import Base
from bragger.models.category import Category
from bragger.models.image import AchievementImage
from bragger.models.milestone import Milestone
from bragger.models.tag import AchievementTag, Tag
from bragger.models.user import User

__all__ = [
    "Base",
    "User",
    "Category",
    "Tag",
    "AchievementTag",
    "Achievement",
    "AchievementStatus",
    "AchievementImage",
    "Milestone",
]
