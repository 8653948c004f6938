"""End-to-end tests for BraggerClient against the test app over ASGI."""

from __future__ import annotations

import httpx
import pytest
from httpx import ASGITransport

from bragger.client.api import ApiError, BraggerClient, build_query
from bragger.schemas.achievement import AchievementFilters
from tests.conftest import PNG_BYTES, create_category


@pytest.fixture
async def api(app):
    async with BraggerClient("http://test/api", transport=ASGITransport(app=app)) as c:
        yield c


class TestBuildQuery:
    def test_drops_none_and_repeats_lists(self):
        params = build_query({"search": None, "tags": ["a", "b"], "page": 2, "includeStats": True})
        assert params == [("tags", "a"), ("tags", "b"), ("page", "2"), ("includeStats", "true")]

    def test_model_uses_camel_case(self):
        params = build_query(AchievementFilters(category_id="abc", page_size=5))
        assert ("categoryId", "abc") in params
        assert ("pageSize", "5") in params
        assert all(key != "userId" for key, _ in params)

    def test_none(self):
        assert build_query(None) == []


class TestAuthFlow:
    async def test_register_sets_token(self, api):
        body = await api.register("client@example.com", "Client", "Sup3rSecret")
        assert api.token == body["data"]["token"]
        profile = await api.get_profile()
        assert profile["data"]["email"] == "client@example.com"

    async def test_login_failure_raises_api_error(self, api):
        with pytest.raises(ApiError) as exc_info:
            await api.login("ghost@example.com", "Whatever1")
        assert exc_info.value.status == 401
        assert exc_info.value.message == "Invalid email or password"
        assert exc_info.value.data == {"success": False, "error": "Invalid email or password"}
        assert api.token is None

    async def test_unauthenticated_call(self, api):
        with pytest.raises(ApiError) as exc_info:
            await api.get_achievements()
        assert exc_info.value.status == 401


class TestAchievementCalls:
    async def test_crud_round(self, api, db, upload_dir):
        category = await create_category(db, name="Development")
        await api.register("crud@example.com", "Crud", "Sup3rSecret")

        created = await api.create_achievement(
            {
                "title": "Cut build times",
                "description": "Parallelised the CI pipeline",
                "startDate": "2024-01-01",
                "categoryId": str(category.id),
                "status": "usable",
                "tags": ["ci"],
            }
        )
        achievement_id = created["data"]["id"]

        listed = await api.get_achievements({"tags": ["ci"]})
        assert [a["id"] for a in listed["data"]] == [achievement_id]

        updated = await api.update_achievement(achievement_id, {"status": "complete"})
        assert updated["data"]["status"] == "complete"

        uploaded = await api.upload_images(achievement_id, [("a.png", PNG_BYTES, "image/png")])
        image_id = uploaded["data"][0]["id"]
        await api.delete_image(image_id)

        milestone = await api.create_milestone(achievement_id, {"title": "Measure"})
        milestones = await api.get_milestones(achievement_id)
        assert [m["id"] for m in milestones["data"]] == [milestone["data"]["id"]]

        await api.delete_achievement(achievement_id)
        with pytest.raises(ApiError) as exc_info:
            await api.get_achievement(achievement_id)
        assert exc_info.value.status == 404


class TestNonJsonErrors:
    async def test_fallback_message(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(502, text="Bad gateway"))
        async with BraggerClient("http://test/api", transport=transport) as api:
            with pytest.raises(ApiError) as exc_info:
                await api.get_categories()
        assert exc_info.value.message == "HTTP error! status: 502"
        assert exc_info.value.data == {}

    async def test_sends_bearer_token(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("authorization")
            seen["url"] = str(request.url)
            return httpx.Response(200, json={"success": True, "data": []})

        async with BraggerClient(
            "http://test/api", token="abc", transport=httpx.MockTransport(handler)
        ) as api:
            await api.get_tags({"search": "py"})
        assert seen["auth"] == "Bearer abc"
        assert seen["url"] == "http://test/api/tags?search=py"
