"""Unit tests for the in-memory fakes shipped for export tests."""
from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

from entry_export.application.export import (
    EntryMetaStore,
    EntryStore,
    PaymentMetaStore,
    PaymentStore,
    StateStore,
    UserDirectory,
)
from entry_export.domain import Entry, ExportCriteria, SearchFilter
from entry_export.testing.fakes import (
    FakeClock,
    InMemoryEntryMetaStore,
    InMemoryEntryStore,
    InMemoryPaymentMetaStore,
    InMemoryPaymentStore,
    InMemoryStateStore,
    InMemoryUserDirectory,
)

DATE = datetime(2026, 3, 1, tzinfo=UTC)


def _store() -> InMemoryEntryStore:
    return InMemoryEntryStore(
        entries=[
            Entry(entry_id=2, form_id=1, date=DATE + timedelta(days=1), fields={"1": "Bob"}),
            Entry(entry_id=1, form_id=1, date=DATE, fields={"1": "Ann", "4": "x"}),
            Entry(entry_id=3, form_id=2, date=DATE, fields={"1": "Cy"}),
        ]
    )


class TestProtocols:
    def test_fakes_satisfy_ports(self) -> None:
        assert isinstance(InMemoryEntryStore(), EntryStore)
        assert isinstance(InMemoryEntryMetaStore(), EntryMetaStore)
        assert isinstance(InMemoryPaymentStore(), PaymentStore)
        assert isinstance(InMemoryPaymentMetaStore(), PaymentMetaStore)
        assert isinstance(InMemoryUserDirectory(), UserDirectory)
        assert isinstance(InMemoryStateStore(), StateStore)


class TestInMemoryEntryStore:
    def test_pages_ordered_by_id(self) -> None:
        store = _store()
        page = asyncio.run(store.fetch_page(ExportCriteria(form_id=1), 0, 10))
        assert [e.entry_id for e in page] == [1, 2]
        assert store.page_calls == [(0, 10)]

    def test_search_comparisons(self) -> None:
        store = _store()

        def ids(comparison: str, value: str) -> list[int]:
            criteria = ExportCriteria(form_id=1, search=SearchFilter(value=value, comparison=comparison))
            return [e.entry_id for e in asyncio.run(store.fetch_page(criteria, 0, 10))]

        assert ids("contains", "an") == [1]
        assert ids("contains_not", "an") == [2]
        assert ids("is", "bob") == [2]
        assert ids("is_not", "bob") == [1]

    def test_date_range(self) -> None:
        criteria = ExportCriteria(form_id=1, date_from=DATE + timedelta(hours=1))
        assert asyncio.run(_store().count(criteria)) == 1

    def test_stored_field_ids(self) -> None:
        assert asyncio.run(_store().stored_field_ids(1)) == ["1", "4"]

    def test_remove(self) -> None:
        store = _store()
        store.remove(1)
        assert asyncio.run(store.count(ExportCriteria(form_id=1))) == 1


class TestInMemoryStateStore:
    def test_ttl_and_isolation(self) -> None:
        clock = FakeClock()
        store = InMemoryStateStore(clock)
        value = {"nested": {"n": 1}}
        asyncio.run(store.set("k", value, 10))
        value["nested"]["n"] = 2

        assert asyncio.run(store.get("k")) == {"nested": {"n": 1}}
        clock.expire(10)
        assert asyncio.run(store.get("k")) is None
        assert store.keys() == []
        assert store.writes == 1
