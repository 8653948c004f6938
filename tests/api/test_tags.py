"""Integration tests for the /tags endpoints."""

from __future__ import annotations

import uuid

from tests.conftest import create_achievement, create_tag


class TestTagsApi:
    async def test_create_normalizes_name(self, client):
        resp = await client.post("/api/tags", json={"name": "  Kubernetes "})
        assert resp.status_code == 201
        assert resp.json()["data"]["name"] == "kubernetes"
        assert resp.json()["message"] == "Tag created successfully"

    async def test_duplicate(self, client, db):
        await create_tag(db, name="docker")
        resp = await client.post("/api/tags", json={"name": "Docker"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Tag name already exists"

    async def test_missing_name(self, client):
        resp = await client.post("/api/tags", json={})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Tag name is required"

    async def test_list_with_usage(self, client, db, user, category):
        used = await create_tag(db, name="used")
        await create_tag(db, name="unused")
        await create_achievement(db, user=user, category=category, tags=[used])

        resp = await client.get("/api/tags", params={"includeStats": "true"})
        usage = {t["name"]: t["usageCount"] for t in resp.json()["data"]}
        assert usage == {"unused": 0, "used": 1}

    async def test_list_plain(self, client, db):
        await create_tag(db, name="b")
        await create_tag(db, name="a")
        resp = await client.get("/api/tags")
        data = resp.json()["data"]
        assert [t["name"] for t in data] == ["a", "b"]
        assert "usageCount" not in data[0]

    async def test_rename(self, client, db):
        tag = await create_tag(db, name="js")
        resp = await client.put(f"/api/tags/{tag.id}", json={"name": "JavaScript"})
        assert resp.status_code == 200
        assert resp.json()["data"]["name"] == "javascript"

    async def test_get_missing(self, client):
        resp = await client.get(f"/api/tags/{uuid.uuid4()}")
        assert resp.status_code == 404
        assert resp.json()["error"] == "Tag not found"

    async def test_delete_in_use(self, client, db, user, category):
        tag = await create_tag(db, name="busy")
        await create_achievement(db, user=user, category=category, tags=[tag])
        resp = await client.delete(f"/api/tags/{tag.id}")
        assert resp.status_code == 400
        assert resp.json()["error"] == "Cannot delete tag that is in use by achievements"

    async def test_delete(self, client, db):
        tag = await create_tag(db, name="idle")
        resp = await client.delete(f"/api/tags/{tag.id}")
        assert resp.json() == {"success": True, "message": "Tag deleted successfully"}
