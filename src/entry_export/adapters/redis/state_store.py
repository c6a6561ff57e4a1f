"""Redis adapter – RedisStateStore keeps export state between steps."""
from __future__ import annotations

import json
from typing import Any

from entry_export.observability.logging import get_logger

_log = get_logger(__name__)


def _require_redis() -> Any:
    try:
        import redis.asyncio as aioredis
        return aioredis
    except ImportError as exc:
        raise ImportError("Install 'entry-export[redis]' to use the Redis adapter") from exc


class RedisStateStore:
    """Export state as JSON under ``<namespace><key>`` with ``SET EX`` expiry.

    Pass either a connection *url* or an existing ``redis.asyncio`` *client*.
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        client: Any | None = None,
        namespace: str = "entry-export:",
        **kwargs: Any,
    ) -> None:
        if client is None:
            if url is None:
                raise ValueError("RedisStateStore needs a url or a client")
            client = _require_redis().from_url(url, **kwargs)
        self._client = client
        self._namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    async def set(self, key: str, value: dict[str, Any], ttl_seconds: int) -> None:
        data = json.dumps(value, ensure_ascii=False, default=str).encode()
        await self._client.set(self._key(key), data, ex=ttl_seconds)

    async def get(self, key: str) -> dict[str, Any] | None:
        raw = await self._client.get(self._key(key))
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            _log.warning("export.state_undecodable", key=key)
            return None
        return data if isinstance(data, dict) else None

    async def delete(self, key: str) -> None:
        await self._client.delete(self._key(key))

    async def close(self) -> None:
        await self._client.aclose()


__all__ = ["RedisStateStore"]
