"""Testing fakes – in-memory doubles for the export ports."""
from entry_export.kernel.time import FrozenClock
from entry_export.testing.fakes.clock import FakeClock
from entry_export.testing.fakes.entries import (
    InMemoryEntryMetaStore,
    InMemoryEntryStore,
    InMemoryPaymentMetaStore,
    InMemoryPaymentStore,
    InMemoryUserDirectory,
)
from entry_export.testing.fakes.state_store import InMemoryStateStore

__all__ = [
    "FakeClock",
    "FrozenClock",
    "InMemoryEntryMetaStore",
    "InMemoryEntryStore",
    "InMemoryPaymentMetaStore",
    "InMemoryPaymentStore",
    "InMemoryStateStore",
    "InMemoryUserDirectory",
]
