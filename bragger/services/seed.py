"""Seed the default categories and starter tags."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bragger.models.category import Category
from bragger.models.tag import Tag

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    {"name": "Development", "color": "#3b82f6"},
    {"name": "Leadership", "color": "#10b981"},
    {"name": "Innovation", "color": "#f59e0b"},
    {"name": "Problem Solving", "color": "#ef4444"},
]

DEFAULT_TAGS = [
    "react",
    "typescript",
    "leadership",
    "performance",
    "security",
    "docker",
    "database",
]


async def seed_defaults(db: AsyncSession) -> None:
    """Insert whichever default categories and tags are missing.

    Safe to run on every startup: existing rows are left untouched.
    """
    existing_categories = set((await db.execute(select(Category.name))).scalars().all())
    existing_tags = set((await db.execute(select(Tag.name))).scalars().all())

    new_categories = [
        Category(name=c["name"], color=c["color"])
        for c in DEFAULT_CATEGORIES
        if c["name"] not in existing_categories
    ]
    new_tags = [Tag(name=name) for name in DEFAULT_TAGS if name not in existing_tags]

    db.add_all(new_categories)
    db.add_all(new_tags)
    await db.commit()

    if new_categories or new_tags:
        logger.info(
            "Seeded %d categories and %d tags", len(new_categories), len(new_tags)
        )
