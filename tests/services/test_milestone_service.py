"""Tests for MilestoneService: ownership checks, ordering and completion handling."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest

from bragger.core.errors import NotFoundError, ValidationError
from bragger.schemas.milestone import MilestoneCreate, MilestoneUpdate
from bragger.services.dates import as_utc
from bragger.services.milestone_service import MilestoneService
from tests.conftest import create_achievement, create_category, create_user


@pytest.fixture
async def owned(db):
    user = await create_user(db)
    category = await create_category(db)
    achievement = await create_achievement(db, user=user, category=category)
    return user, achievement


class TestCreateMilestone:
    async def test_create(self, db, owned):
        user, achievement = owned
        milestone = await MilestoneService(db).create(
            achievement.id,
            user.id,
            MilestoneCreate(title="Write the RFC", due_date="2024-03-01", order=2),
        )
        assert milestone.title == "Write the RFC"
        assert milestone.order == 2
        assert milestone.user_id == user.id
        assert as_utc(milestone.due_date) == datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert milestone.is_completed is False

    @pytest.mark.parametrize("title", [None, "", "   "])
    async def test_title_required(self, db, owned, title):
        user, achievement = owned
        with pytest.raises(ValidationError, match="Title is required"):
            await MilestoneService(db).create(achievement.id, user.id, MilestoneCreate(title=title))

    async def test_invalid_due_date(self, db, owned):
        user, achievement = owned
        with pytest.raises(ValidationError, match="Invalid due date format"):
            await MilestoneService(db).create(
                achievement.id, user.id, MilestoneCreate(title="x", due_date="next week")
            )

    async def test_foreign_achievement(self, db, owned):
        _, achievement = owned
        stranger = await create_user(db)
        with pytest.raises(NotFoundError, match="Achievement not found"):
            await MilestoneService(db).create(
                achievement.id, stranger.id, MilestoneCreate(title="Sneaky")
            )


class TestListMilestones:
    async def test_ordered_by_order_then_creation(self, db, owned):
        user, achievement = owned
        service = MilestoneService(db)
        await service.create(achievement.id, user.id, MilestoneCreate(title="Third", order=5))
        await service.create(achievement.id, user.id, MilestoneCreate(title="First", order=0))
        await service.create(achievement.id, user.id, MilestoneCreate(title="Second", order=0))

        milestones = await service.list_for_achievement(achievement.id, user.id)
        assert [m.title for m in milestones] == ["First", "Second", "Third"]

    async def test_unknown_achievement(self, db, owned):
        user, _ = owned
        with pytest.raises(NotFoundError, match="Achievement not found"):
            await MilestoneService(db).list_for_achievement(uuid.uuid4(), user.id)


class TestUpdateMilestone:
    async def test_mark_completed_and_reopen(self, db, owned):
        user, achievement = owned
        service = MilestoneService(db)
        milestone = await service.create(achievement.id, user.id, MilestoneCreate(title="Ship"))

        done = await service.update(
            achievement.id, milestone.id, user.id, MilestoneUpdate(is_completed=True)
        )
        assert done.completed_at is not None
        assert done.is_completed is True

        reopened = await service.update(
            achievement.id, milestone.id, user.id, MilestoneUpdate(is_completed=False)
        )
        assert reopened.completed_at is None

    async def test_explicit_completed_at_wins(self, db, owned):
        user, achievement = owned
        service = MilestoneService(db)
        milestone = await service.create(achievement.id, user.id, MilestoneCreate(title="Ship"))

        updated = await service.update(
            achievement.id,
            milestone.id,
            user.id,
            MilestoneUpdate(is_completed=True, completed_at="2024-05-05T12:00:00Z"),
        )
        assert as_utc(updated.completed_at) == datetime(2024, 5, 5, 12, tzinfo=timezone.utc)

    async def test_empty_title_rejected(self, db, owned):
        user, achievement = owned
        service = MilestoneService(db)
        milestone = await service.create(achievement.id, user.id, MilestoneCreate(title="Ship"))
        with pytest.raises(ValidationError, match="Title cannot be empty"):
            await service.update(achievement.id, milestone.id, user.id, MilestoneUpdate(title=""))

    async def test_clear_due_date(self, db, owned):
        user, achievement = owned
        service = MilestoneService(db)
        milestone = await service.create(
            achievement.id, user.id, MilestoneCreate(title="Ship", due_date="2024-01-10")
        )
        updated = await service.update(
            achievement.id, milestone.id, user.id, MilestoneUpdate(due_date=None)
        )
        assert updated.due_date is None

    async def test_milestone_of_other_achievement(self, db, owned):
        user, achievement = owned
        category = await create_category(db)
        other = await create_achievement(db, user=user, category=category)
        service = MilestoneService(db)
        milestone = await service.create(achievement.id, user.id, MilestoneCreate(title="Ship"))
        with pytest.raises(NotFoundError, match="Milestone not found"):
            await service.update(other.id, milestone.id, user.id, MilestoneUpdate(title="Moved"))


class TestDeleteMilestone:
    async def test_delete(self, db, owned):
        user, achievement = owned
        service = MilestoneService(db)
        milestone = await service.create(achievement.id, user.id, MilestoneCreate(title="Ship"))
        await service.delete(achievement.id, milestone.id, user.id)
        assert await service.list_for_achievement(achievement.id, user.id) == []

    async def test_not_owner(self, db, owned):
        user, achievement = owned
        stranger = await create_user(db)
        service = MilestoneService(db)
        milestone = await service.create(achievement.id, user.id, MilestoneCreate(title="Ship"))
        with pytest.raises(NotFoundError, match="Milestone not found"):
            await service.delete(achievement.id, milestone.id, stranger.id)
