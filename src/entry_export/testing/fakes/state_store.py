"""Testing fakes – InMemoryStateStore."""
from __future__ import annotations

import copy
from typing import Any

from entry_export.kernel.time import Clock, SystemClock


class InMemoryStateStore:
    """Dict-backed StateStore honouring TTLs against an injectable clock."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock: Clock = clock or SystemClock()
        self._items: dict[str, tuple[dict[str, Any], float]] = {}
        self.writes = 0

    async def set(self, key: str, value: dict[str, Any], ttl_seconds: int) -> None:
        self._items[key] = (copy.deepcopy(value), self._clock.timestamp() + ttl_seconds)
        self.writes += 1

    async def get(self, key: str) -> dict[str, Any] | None:
        item = self._items.get(key)
        if item is None:
            return None
        value, expires_at = item
        if self._clock.timestamp() >= expires_at:
            del self._items[key]
            return None
        return copy.deepcopy(value)

    def keys(self) -> list[str]:
        return list(self._items)


__all__ = ["InMemoryStateStore"]
