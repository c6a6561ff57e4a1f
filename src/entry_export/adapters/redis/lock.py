"""Redis adapter – RedisStepGuard serialises export steps across workers."""
from __future__ import annotations

import contextlib
import uuid
from typing import Any, AsyncIterator

from entry_export.kernel.errors import StepInProgressError

_RELEASE_SCRIPT = """
if redis.call("GET", KEYS[1]) == ARGV[1] then
    return redis.call("DEL", KEYS[1])
else
    return 0
end
"""


class RedisStepGuard:
    """One step per job across processes, using ``SET NX PX``.

    The lock expires after *ttl_ms* so a crashed worker cannot wedge a job;
    release only deletes a lock still holding this holder's token.
    """

    def __init__(self, client: Any, *, namespace: str = "entry-export:lock:", ttl_ms: int = 300_000) -> None:
        self._client = client
        self._namespace = namespace
        self._ttl_ms = ttl_ms

    @contextlib.asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        name = f"{self._namespace}{key}"
        token = uuid.uuid4().hex
        if not await self._client.set(name, token, nx=True, px=self._ttl_ms):
            raise StepInProgressError(key)
        try:
            yield
        finally:
            await self._client.eval(_RELEASE_SCRIPT, 1, name, token)


__all__ = ["RedisStepGuard"]
