"""In-memory query cache keyed by ``(entity, kind, ...)`` tuples."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel

QueryKey = tuple


def freeze(value: Any) -> Any:
    """Turn filter objects into a hashable, order-independent key part."""
    if isinstance(value, BaseModel):
        value = value.model_dump(by_alias=True, exclude_none=True, mode="json")
    if isinstance(value, dict):
        return tuple(sorted((k, freeze(v)) for k, v in value.items() if v is not None))
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


class QueryCache:
    def __init__(self):
        self._entries: dict[QueryKey, Any] = {}

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[QueryKey]:
        return list(self._entries)

    def get(self, key: QueryKey, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def set(self, key: QueryKey, value: Any) -> None:
        self._entries[key] = value

    def remove(self, key: QueryKey) -> None:
        self._entries.pop(key, None)

    def invalidate(self, prefix: QueryKey) -> int:
        """Drop every key starting with ``prefix``; returns how many were dropped."""
        n = len(prefix)
        stale = [key for key in self._entries if key[:n] == prefix]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    async def fetch(self, key: QueryKey, loader: Callable[[], Awaitable[Any]]) -> Any:
        if key in self._entries:
            return self._entries[key]
        value = await loader()
        self._entries[key] = value
        return value
