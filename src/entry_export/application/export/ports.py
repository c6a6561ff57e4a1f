"""Application export – ports to the collaborators the pipeline depends on."""
from __future__ import annotations

from typing import Any, AsyncContextManager, Protocol, Sequence, runtime_checkable

from entry_export.domain import (
    Author,
    Entry,
    EntryNote,
    ExportCriteria,
    FormSchema,
    Location,
    Payment,
    PaymentMeta,
)

__all__ = [
    "EntryMetaStore",
    "EntryStore",
    "PaymentMetaStore",
    "PaymentStore",
    "StateStore",
    "StepGuard",
    "UserDirectory",
]


@runtime_checkable
class EntryStore(Protocol):
    """Port: read access to forms and their entries.

    ``fetch_page`` must order entries by ``entry_id`` ascending so that
    consecutive offsets neither overlap nor skip records.
    """

    async def count(self, criteria: ExportCriteria) -> int: ...

    async def fetch_page(self, criteria: ExportCriteria, offset: int, limit: int) -> Sequence[Entry]: ...

    async def fetch_form(self, form_id: int) -> FormSchema | None: ...

    async def stored_field_ids(self, form_id: int) -> Sequence[str]:
        """Distinct field ids present in stored entry data of the form."""
        ...


@runtime_checkable
class EntryMetaStore(Protocol):
    """Port: notes and geolocation stored alongside entries."""

    async def notes(self, entry_id: int) -> Sequence[EntryNote]: ...

    async def location(self, entry_id: int) -> Location | None: ...


@runtime_checkable
class PaymentStore(Protocol):
    async def get_by_entry(self, entry_id: int) -> Payment | None: ...


@runtime_checkable
class PaymentMetaStore(Protocol):
    async def get_all(self, payment_id: int) -> dict[str, PaymentMeta]: ...


@runtime_checkable
class UserDirectory(Protocol):
    async def get(self, user_id: int) -> Author | None: ...


@runtime_checkable
class StateStore(Protocol):
    """Port: transient key-value store with per-key expiry."""

    async def set(self, key: str, value: dict[str, Any], ttl_seconds: int) -> None: ...

    async def get(self, key: str) -> dict[str, Any] | None: ...


@runtime_checkable
class StepGuard(Protocol):
    """Port: at most one holder per key; a second ``hold`` raises ``StepInProgressError``."""

    def hold(self, key: str) -> AsyncContextManager[None]: ...
