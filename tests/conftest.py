"""Shared fixtures: an ExportJob wired to in-memory stores and a tmp output dir."""
from __future__ import annotations

import dataclasses
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any, Callable

import pytest

from entry_export.application.export import ExportJob, InfoSources, SinkRegistry
from entry_export.config import ExportSettings
from entry_export.domain import Entry, ExportCriteria, ExportFormat, ExportRequest, Field, FormSchema
from entry_export.testing.fakes import (
    FakeClock,
    InMemoryEntryMetaStore,
    InMemoryEntryStore,
    InMemoryPaymentMetaStore,
    InMemoryPaymentStore,
    InMemoryStateStore,
    InMemoryUserDirectory,
)

BASE_DATE = datetime(2026, 3, 1, 10, 0, tzinfo=UTC)


def _make_form(form_id: int = 1, *, has_payments: bool = False) -> FormSchema:
    return FormSchema(
        form_id=form_id,
        fields=(
            Field(id="1", type="name", label="Name"),
            Field(id="2", type="email", label="<b>Email</b> "),
            Field(id="3", type="divider", label="Section"),
            Field(id="7", type="text", label=""),
        ),
        has_payments=has_payments,
    )


def _make_entries(count: int, form_id: int = 1, start_id: int = 1) -> list[Entry]:
    return [
        Entry(
            entry_id=i,
            form_id=form_id,
            date=BASE_DATE + timedelta(minutes=i),
            fields={"1": f"Person {i}", "2": f"p{i}@example.com", "7": f"note {i}"},
        )
        for i in range(start_id, start_id + count)
    ]


@dataclasses.dataclass
class Harness:
    entries: InMemoryEntryStore
    meta: InMemoryEntryMetaStore
    payments: InMemoryPaymentStore
    payment_meta: InMemoryPaymentMetaStore
    users: InMemoryUserDirectory
    state: InMemoryStateStore
    clock: FakeClock
    settings: ExportSettings
    output_dir: Path
    sources: InfoSources
    job: ExportJob

    def request(
        self,
        *,
        form_id: int | None = 1,
        fields: tuple[str, ...] = ("1", "2"),
        additional_info: tuple[str, ...] = (),
        fmt: ExportFormat = ExportFormat.CSV,
        entry_ids: tuple[int, ...] = (),
        page_size: int | None = None,
    ) -> ExportRequest:
        return ExportRequest(
            criteria=ExportCriteria(form_id=form_id, entry_ids=entry_ids),
            fields=fields,
            additional_info=additional_info,
            format=fmt,
            page_size=page_size or self.settings.entries_per_step,
        )


@pytest.fixture
def make_harness(tmp_path: Path) -> Callable[..., Harness]:
    def _make(
        *,
        entries: int = 0,
        form: FormSchema | None = None,
        state_store: InMemoryStateStore | None = None,
        **settings_overrides: Any,
    ) -> Harness:
        clock = FakeClock()
        overrides: dict[str, Any] = {"entries_per_step": 50, "output_dir": str(tmp_path)}
        overrides.update(settings_overrides)
        settings = ExportSettings(**overrides)
        store = InMemoryEntryStore([form or _make_form()], _make_entries(entries))
        meta = InMemoryEntryMetaStore()
        payments = InMemoryPaymentStore()
        payment_meta = InMemoryPaymentMetaStore()
        users = InMemoryUserDirectory()
        state = state_store or InMemoryStateStore(clock)
        sources = InfoSources(meta=meta, payments=payments, payment_meta=payment_meta, users=users)
        job = ExportJob(
            store,
            sources,
            SinkRegistry.local(tmp_path, bom=settings.csv_bom),
            state,
            settings,
            clock=clock,
        )
        return Harness(
            entries=store,
            meta=meta,
            payments=payments,
            payment_meta=payment_meta,
            users=users,
            state=state,
            clock=clock,
            settings=settings,
            output_dir=tmp_path,
            sources=sources,
            job=job,
        )

    return _make


@pytest.fixture
def make_form() -> Callable[..., FormSchema]:
    return _make_form


@pytest.fixture
def make_entries() -> Callable[..., list[Entry]]:
    return _make_entries
