"""Async HTTP client for the Bragger REST API."""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

API_BASE_URL = os.getenv("BRAGGER_API_URL", "http://localhost:3001/api")


class ApiError(Exception):
    """Non-2xx response; ``data`` holds the parsed error body (or ``{}``)."""

    def __init__(self, message: str, status: int, data: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data or {}


def _to_wire(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True, mode="json")
    return value


def build_query(filters: BaseModel | dict[str, Any] | None) -> list[tuple[str, str]]:
    """Flatten filters into query parameters.

    None values are dropped and list values become repeated parameters.
    """
    if filters is None:
        return []
    values = _to_wire(filters)
    params: list[tuple[str, str]] = []
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            params.extend((key, str(v)) for v in value)
        elif isinstance(value, bool):
            params.append((key, "true" if value else "false"))
        else:
            params.append((key, str(value)))
    return params


class BraggerClient:
    """Thin async wrapper around the REST endpoints, one method per operation."""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        token: str | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._transport = transport
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> BraggerClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                transport=self._transport,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        files: list[tuple[str, tuple[str, bytes, str]]] | None = None,
    ) -> dict[str, Any]:
        client = await self._get_client()
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        resp = await client.request(
            method,
            endpoint,
            params=params or None,
            json=_to_wire(json),
            files=files,
            headers=headers,
        )

        if resp.is_error:
            try:
                data = resp.json()
            except ValueError:
                data = {}
            if not isinstance(data, dict):
                data = {}
            message = data.get("error") or f"HTTP error! status: {resp.status_code}"
            logger.debug("API error %s on %s %s: %s", resp.status_code, method, endpoint, data)
            raise ApiError(message, resp.status_code, data)

        return resp.json()

    # ── Generic resource helpers ────────────────────────────────────────

    async def list_resource(self, path: str, filters: BaseModel | dict | None = None) -> dict:
        return await self.request("GET", path, params=build_query(filters))

    async def get_resource(self, path: str, resource_id: str) -> dict:
        return await self.request("GET", f"{path}/{resource_id}")

    async def create_resource(self, path: str, data: BaseModel | dict) -> dict:
        return await self.request("POST", path, json=data)

    async def update_resource(self, path: str, resource_id: str, data: BaseModel | dict) -> dict:
        return await self.request("PUT", f"{path}/{resource_id}", json=data)

    async def delete_resource(self, path: str, resource_id: str) -> dict:
        return await self.request("DELETE", f"{path}/{resource_id}")

    # ── Auth ────────────────────────────────────────────────────────────

    async def register(self, email: str, name: str, password: str) -> dict:
        body = await self.request(
            "POST", "/auth/register", json={"email": email, "name": name, "password": password}
        )
        self.token = body["data"]["token"]
        return body

    async def login(self, email: str, password: str) -> dict:
        body = await self.request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        self.token = body["data"]["token"]
        return body

    async def get_profile(self) -> dict:
        return await self.request("GET", "/auth/profile")

    # ── Achievements ────────────────────────────────────────────────────

    async def get_achievements(self, filters: BaseModel | dict | None = None) -> dict:
        return await self.list_resource("/achievements", filters)

    async def get_achievement(self, achievement_id: str) -> dict:
        return await self.get_resource("/achievements", achievement_id)

    async def create_achievement(self, data: BaseModel | dict) -> dict:
        return await self.create_resource("/achievements", data)

    async def update_achievement(self, achievement_id: str, data: BaseModel | dict) -> dict:
        return await self.update_resource("/achievements", achievement_id, data)

    async def delete_achievement(self, achievement_id: str) -> dict:
        return await self.delete_resource("/achievements", achievement_id)

    async def upload_images(
        self, achievement_id: str, files: list[tuple[str, bytes, str]]
    ) -> dict:
        """Upload ``(filename, content, content_type)`` tuples as the ``images`` field."""
        return await self.request(
            "POST",
            f"/achievements/{achievement_id}/images",
            files=[("images", f) for f in files],
        )

    async def delete_image(self, image_id: str) -> dict:
        return await self.delete_resource("/images", image_id)

    # ── Milestones ──────────────────────────────────────────────────────

    async def get_milestones(self, achievement_id: str) -> dict:
        return await self.request("GET", f"/achievements/{achievement_id}/milestones")

    async def create_milestone(self, achievement_id: str, data: BaseModel | dict) -> dict:
        return await self.create_resource(f"/achievements/{achievement_id}/milestones", data)

    async def update_milestone(
        self, achievement_id: str, milestone_id: str, data: BaseModel | dict
    ) -> dict:
        return await self.update_resource(
            f"/achievements/{achievement_id}/milestones", milestone_id, data
        )

    async def delete_milestone(self, achievement_id: str, milestone_id: str) -> dict:
        return await self.delete_resource(
            f"/achievements/{achievement_id}/milestones", milestone_id
        )

    # ── Categories ──────────────────────────────────────────────────────

    async def get_categories(self, filters: BaseModel | dict | None = None) -> dict:
        return await self.list_resource("/categories", filters)

    async def get_category(self, category_id: str) -> dict:
        return await self.get_resource("/categories", category_id)

    async def create_category(self, data: BaseModel | dict) -> dict:
        return await self.create_resource("/categories", data)

    async def update_category(self, category_id: str, data: BaseModel | dict) -> dict:
        return await self.update_resource("/categories", category_id, data)

    async def delete_category(self, category_id: str) -> dict:
        return await self.delete_resource("/categories", category_id)

    # ── Tags ────────────────────────────────────────────────────────────

    async def get_tags(self, filters: BaseModel | dict | None = None) -> dict:
        return await self.list_resource("/tags", filters)

    async def get_tag(self, tag_id: str) -> dict:
        return await self.get_resource("/tags", tag_id)

    async def create_tag(self, data: BaseModel | dict) -> dict:
        return await self.create_resource("/tags", data)

    async def update_tag(self, tag_id: str, data: BaseModel | dict) -> dict:
        return await self.update_resource("/tags", tag_id, data)

    async def delete_tag(self, tag_id: str) -> dict:
        return await self.delete_resource("/tags", tag_id)
