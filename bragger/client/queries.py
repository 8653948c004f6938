"""Cached reads and cache-maintaining writes on top of ``BraggerClient``.

Keys follow ``(entity, "list", filters)`` and ``(entity, "detail", id)``.
Writes invalidate the entity's list keys and keep the detail key current.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from bragger.client.api import BraggerClient
from bragger.client.cache import QueryCache, QueryKey, freeze


class EntityQueries:
    entity: str = ""
    path: str = ""

    def __init__(self, client: BraggerClient, cache: QueryCache | None = None):
        self.client = client
        self.cache = cache if cache is not None else QueryCache()

    @property
    def all_key(self) -> QueryKey:
        return (self.entity,)

    @property
    def lists_key(self) -> QueryKey:
        return (self.entity, "list")

    def list_key(self, filters: BaseModel | dict | None = None) -> QueryKey:
        return (self.entity, "list", freeze(filters or {}))

    def detail_key(self, entity_id: str) -> QueryKey:
        return (self.entity, "detail", str(entity_id))

    async def fetch_list(self, filters: BaseModel | dict | None = None) -> dict[str, Any]:
        return await self.cache.fetch(
            self.list_key(filters), lambda: self.client.list_resource(self.path, filters)
        )

    async def fetch_detail(self, entity_id: str) -> dict[str, Any]:
        return await self.cache.fetch(
            self.detail_key(entity_id), lambda: self.client.get_resource(self.path, entity_id)
        )

    async def create(self, data: BaseModel | dict) -> dict[str, Any]:
        body = await self.client.create_resource(self.path, data)
        self.cache.invalidate(self.lists_key)
        self._seed_detail(body)
        return body

    async def update(self, entity_id: str, data: BaseModel | dict) -> dict[str, Any]:
        body = await self.client.update_resource(self.path, entity_id, data)
        self.cache.invalidate(self.lists_key)
        self._seed_detail(body)
        return body

    async def delete(self, entity_id: str) -> dict[str, Any]:
        body = await self.client.delete_resource(self.path, entity_id)
        self.cache.remove(self.detail_key(entity_id))
        self.cache.invalidate(self.lists_key)
        return body

    def _seed_detail(self, body: dict[str, Any]) -> None:
        data = body.get("data")
        if isinstance(data, dict) and data.get("id"):
            self.cache.set(self.detail_key(data["id"]), body)


class AchievementQueries(EntityQueries):
    entity = "achievements"
    path = "/achievements"

    def milestones_key(self, achievement_id: str) -> QueryKey:
        return (*self.detail_key(achievement_id), "milestones")

    async def upload_images(
        self, achievement_id: str, files: list[tuple[str, bytes, str]]
    ) -> dict[str, Any]:
        body = await self.client.upload_images(achievement_id, files)
        self.cache.remove(self.detail_key(achievement_id))
        self.cache.invalidate(self.lists_key)
        return body

    async def delete_image(self, achievement_id: str, image_id: str) -> dict[str, Any]:
        body = await self.client.delete_image(image_id)
        self.cache.remove(self.detail_key(achievement_id))
        self.cache.invalidate(self.lists_key)
        return body

    async def fetch_milestones(self, achievement_id: str) -> dict[str, Any]:
        return await self.cache.fetch(
            self.milestones_key(achievement_id),
            lambda: self.client.get_milestones(achievement_id),
        )

    async def create_milestone(
        self, achievement_id: str, data: BaseModel | dict
    ) -> dict[str, Any]:
        body = await self.client.create_milestone(achievement_id, data)
        # Detail, milestone list and achievement lists all embed milestones
        self.cache.invalidate(self.detail_key(achievement_id))
        self.cache.invalidate(self.lists_key)
        return body

    async def update_milestone(
        self, achievement_id: str, milestone_id: str, data: BaseModel | dict
    ) -> dict[str, Any]:
        body = await self.client.update_milestone(achievement_id, milestone_id, data)
        self.cache.invalidate(self.detail_key(achievement_id))
        self.cache.invalidate(self.lists_key)
        return body

    async def delete_milestone(self, achievement_id: str, milestone_id: str) -> dict[str, Any]:
        body = await self.client.delete_milestone(achievement_id, milestone_id)
        self.cache.invalidate(self.detail_key(achievement_id))
        self.cache.invalidate(self.lists_key)
        return body


class CategoryQueries(EntityQueries):
    entity = "categories"
    path = "/categories"


class TagQueries(EntityQueries):
    entity = "tags"
    path = "/tags"
