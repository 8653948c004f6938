"""Shared test fixtures for the Bragger backend.

Provides:
- In-memory SQLite database (fresh schema per test)
- FastAPI test app + HTTP client with the DB dependency overridden
- Factory helpers for users, categories, tags and achievements
"""

from __future__ import annotations

import os
import uuid
from datetime import datetime, timezone

# Set test environment BEFORE any app imports so Settings() picks them up.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-pytest-only")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from bragger.core.security import create_access_token, hash_password
from bragger.models import Base

# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
async def db():
    """A session on a private in-memory database, discarded after the test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session = AsyncSession(bind=engine, expire_on_commit=False)
    yield session

    await session.close()
    await engine.dispose()


# ---------------------------------------------------------------------------
# FastAPI test app + HTTP client
# ---------------------------------------------------------------------------


@pytest.fixture
async def app(db):
    """Minimal FastAPI test app with ``get_db`` overridden to use the test session."""
    from fastapi import FastAPI

    from bragger.api.errors import register_exception_handlers
    from bragger.api.v1.router import api_router
    from bragger.config import settings
    from bragger.core.rate_limit import limiter
    from bragger.database import get_db

    test_app = FastAPI()
    test_app.state.limiter = limiter
    register_exception_handlers(test_app)
    test_app.include_router(api_router, prefix=settings.API_PREFIX)

    async def _override_get_db():
        yield db

    test_app.dependency_overrides[get_db] = _override_get_db
    yield test_app
    test_app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    """HTTP test client for the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c


@pytest.fixture(autouse=True)
def _disable_rate_limiter():
    """Disable slowapi rate limiting during tests to avoid 429 responses."""
    from bragger.core.rate_limit import limiter

    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Point image storage at a temporary directory."""
    from bragger.config import settings

    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    return tmp_path


# ---------------------------------------------------------------------------
# Factory helpers
# ---------------------------------------------------------------------------


async def create_user(db, *, email=None, name="Test User", password="TestPassword1"):
    """Insert a user into the test database."""
    from bragger.models.user import User

    user = User(
        email=email or f"test-{uuid.uuid4().hex[:8]}@example.com",
        name=name,
        password_hash=hash_password(password),
    )
    db.add(user)
    await db.commit()
    return user


async def create_category(db, *, name=None, color="#3b82f6"):
    """Insert a category into the test database."""
    from bragger.models.category import Category

    category = Category(name=name or f"Category {uuid.uuid4().hex[:6]}", color=color)
    db.add(category)
    await db.commit()
    return category


async def create_tag(db, *, name=None):
    """Insert a tag into the test database."""
    from bragger.models.tag import Tag

    tag = Tag(name=name or f"tag-{uuid.uuid4().hex[:6]}")
    db.add(tag)
    await db.commit()
    return tag


async def create_achievement(db, *, user, category, tags=None, **kwargs):
    """Insert an achievement (and its tag links) into the test database."""
    from bragger.models.achievement import Achievement
    from bragger.models.tag import AchievementTag

    achievement = Achievement(
        user_id=user.id,
        category_id=category.id,
        title=kwargs.get("title", "Shipped the thing"),
        description=kwargs.get("description", "A detailed account of shipping the thing"),
        start_date=kwargs.get("start_date", datetime(2024, 1, 1, tzinfo=timezone.utc)),
        end_date=kwargs.get("end_date"),
        duration_hours=kwargs.get("duration_hours"),
        impact=kwargs.get("impact"),
        skills_used=kwargs.get("skills_used", []),
        status=kwargs.get("status", "idea"),
        github_url=kwargs.get("github_url"),
        tag_links=[AchievementTag(tag_id=t.id) for t in (tags or [])],
    )
    db.add(achievement)
    await db.commit()
    return achievement


def auth_headers(user) -> dict[str, str]:
    """Generate Bearer token headers for a test user."""
    token = create_access_token(user.id)
    return {"Authorization": f"Bearer {token}"}


def achievement_payload(category, **overrides) -> dict:
    """A valid POST /achievements body."""
    body = {
        "title": "Launched the new dashboard",
        "description": "Rebuilt the reporting dashboard end to end",
        "startDate": "2024-01-01",
        "categoryId": str(category.id),
        "status": "complete",
        "skillsUsed": ["python"],
        "tags": [],
    }
    body.update(overrides)
    return body


# ---------------------------------------------------------------------------
# Convenience fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def user(db):
    return await create_user(db, email="owner@test.com")


@pytest.fixture
async def other_user(db):
    return await create_user(db, email="other@test.com")


@pytest.fixture
async def category(db):
    return await create_category(db, name="Development", color="#3b82f6")


# ---------------------------------------------------------------------------
# Image payloads
# ---------------------------------------------------------------------------

# 1x1 RGBA PNG: signature, IHDR, IDAT and IEND chunks
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a"
    "0000000d49484452000000010000000108060000001f15c489"
    "0000000a49444154789c63000100000500010d0a2db4"
    "0000000049454e44ae426082"
)
GIF_BYTES = b"GIF89a\x01\x00\x01\x00\x00\x00\x00;"
