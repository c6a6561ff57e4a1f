"""Kernel time – the clock the export pipeline reads."""
from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Source of the current instant.

    ``time_ns`` seeds job ids, so two calls must never return the same value.
    """

    def now(self) -> datetime: ...

    def timestamp(self) -> float: ...

    def time_ns(self) -> int: ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(UTC)

    def timestamp(self) -> float:
        return time.time()

    def time_ns(self) -> int:
        return time.time_ns()


class FrozenClock:
    """A clock that only moves through :meth:`advance`.

    ``time_ns`` adds a per-call tick to the frozen instant so ids minted
    back to back still differ.
    """

    def __init__(self, fixed: datetime) -> None:
        if fixed.tzinfo is None:
            raise ValueError("FrozenClock needs a timezone-aware datetime")
        self._now = fixed
        self._ticks = 0

    def now(self) -> datetime:
        return self._now

    def timestamp(self) -> float:
        return self._now.timestamp()

    def time_ns(self) -> int:
        self._ticks += 1
        return int(self._now.timestamp()) * 1_000_000_000 + self._ticks

    def advance(self, delta: timedelta | None = None, **kwargs: float) -> datetime:
        """Move forward by *delta* (or ``timedelta(**kwargs)``); returns the new instant."""
        self._now += delta if delta is not None else timedelta(**kwargs)
        return self._now


__all__ = ["Clock", "FrozenClock", "SystemClock"]
