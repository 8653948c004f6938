from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10


class CamelModel(BaseModel):
    """Base for API payloads: snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ListFilters(CamelModel):
    search: str | None = None
    page: int = Field(DEFAULT_PAGE, ge=1)
    page_size: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class Pagination(CamelModel):
    total: int
    page: int
    page_size: int
    total_pages: int


class Page(CamelModel):
    """One page of a list query, as returned by the services."""

    data: list[Any]
    total: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def build(cls, data: list[Any], total: int, page: int, page_size: int) -> Page:
        return cls(
            data=data,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total / page_size) if page_size else 0,
        )

    @property
    def pagination(self) -> Pagination:
        return Pagination(
            total=self.total,
            page=self.page,
            page_size=self.page_size,
            total_pages=self.total_pages,
        )


def ok(data: Any = None, message: str | None = None) -> dict[str, Any]:
    """Success envelope shared by every endpoint."""
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return body


def paginated(page: Page, items: list[Any]) -> dict[str, Any]:
    return {"success": True, "data": items, "pagination": page.pagination}


def error_body(message: str) -> dict[str, Any]:
    return {"success": False, "error": message}
