"""Application export – ExportJob drives an export through its steps.

States::

    CREATED --step--> STEPPING --step--> ... --> COMPLETE

Every step loads the persisted :class:`ExportState`, rolls the sink back to
the committed checkpoint, processes one page and persists the advanced
state with a fresh TTL.  A step that fails persists nothing, so the caller
may simply call :meth:`ExportJob.step` again.
"""
from __future__ import annotations

import contextlib
import dataclasses
import hashlib
import json
from typing import Any, AsyncIterator, Awaitable, TypeVar

from entry_export.application.export.additional_info import AdditionalInfoHandler, InfoSources
from entry_export.application.export.columns import ColumnPlanner, Translator
from entry_export.application.export.context import FormattingContext
from entry_export.application.export.fetcher import PageFetcher
from entry_export.application.export.formatting import RowFormatter
from entry_export.application.export.ports import EntryStore, StateStore, StepGuard
from entry_export.application.export.sinks import SinkRegistry
from entry_export.config import ExportSettings
from entry_export.domain import ColumnPlan, ExportRequest, ExportState, Field, FormSchema
from entry_export.kernel.errors import (
    DownstreamWriteError,
    EntryFetchError,
    ExportError,
    FormDataMissingError,
    MissingFormIdentifierError,
    StepInProgressError,
    UnknownRequestError,
)
from entry_export.kernel.time import Clock, SystemClock
from entry_export.observability.logging import get_logger, job_context

__all__ = ["STATE_KEY_PREFIX", "ExportJob", "SingleFlight", "StartResult", "StepResult"]

STATE_KEY_PREFIX = "entry-export-request-"

T = TypeVar("T")

_log = get_logger(__name__)


@dataclasses.dataclass(frozen=True)
class StartResult:
    job_id: str
    count: int
    total_steps: int
    columns: ColumnPlan

    def to_dict(self) -> dict[str, Any]:
        return {
            "request_id": self.job_id,
            "count": self.count,
            "total_steps": self.total_steps,
            "columns": self.columns.to_list(),
        }


@dataclasses.dataclass(frozen=True)
class StepResult:
    job_id: str
    step: int
    total_steps: int
    count: int
    written: int
    is_final: bool
    location: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "request_id": self.job_id,
            "step": self.step,
            "total_steps": self.total_steps,
            "count": self.count,
            "written": self.written,
            "is_final": self.is_final,
            "location": self.location,
        }


class SingleFlight:
    """Reject a second concurrent holder of the same key within this process."""

    def __init__(self) -> None:
        self._active: set[str] = set()

    def is_active(self, key: str) -> bool:
        return key in self._active

    @contextlib.asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        if key in self._active:
            raise StepInProgressError(key)
        self._active.add(key)
        try:
            yield
        finally:
            self._active.discard(key)


class ExportJob:
    """Start and step resumable exports.

    Parameters
    ----------
    entries:
        Source of forms and entries.
    sources:
        Stores consulted for the additional-information columns.
    sinks:
        Artifact writers by format; ``None`` builds local sinks from *settings*.
    state_store:
        Transient store holding :class:`ExportState` between steps.
    settings:
        Pipeline tunables; defaults to :class:`ExportSettings()`.
    guard:
        Serialises steps per job; defaults to an in-process :class:`SingleFlight`.
    """

    def __init__(
        self,
        entries: EntryStore,
        sources: InfoSources,
        sinks: SinkRegistry | None,
        state_store: StateStore,
        settings: ExportSettings | None = None,
        *,
        clock: Clock | None = None,
        translate: Translator | None = None,
        handlers: dict[str, AdditionalInfoHandler] | None = None,
        guard: StepGuard | None = None,
    ) -> None:
        self._entries = entries
        self._sources = sources
        self._store = state_store
        self._settings = settings or ExportSettings()
        self._sinks = sinks if sinks is not None else SinkRegistry.from_settings(self._settings)
        self._clock: Clock = clock or SystemClock()
        self._planner = ColumnPlanner(self._settings.disallowed_fields, translate)
        self._fetcher = PageFetcher(entries)
        self._context = FormattingContext.from_settings(self._settings, translate)
        self._handlers = dict(handlers or {})
        self._guard: StepGuard = guard or SingleFlight()

    @property
    def planner(self) -> ColumnPlanner:
        return self._planner

    @property
    def settings(self) -> ExportSettings:
        return self._settings

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def describe_columns(self, form_id: int | None) -> list[Field]:
        """Exportable fields of a form, labels resolved."""
        form = await self._load_form(form_id)
        return self._planner.describe_fields(form)

    async def start(self, request: ExportRequest) -> StartResult:
        form = await self._load_form(request.criteria.form_id)

        if request.criteria.is_filtered:
            request = dataclasses.replace(
                request,
                fields=tuple(f.id for f in self._planner.describe_fields(form)),
                additional_info=tuple(self._planner.available_additional_info(form)),
            )

        counted = await self._fetcher.fetch(request.criteria, 0, 0)
        count = counted.total or 0
        stored_ids = (
            await self._entries.stored_field_ids(form.form_id)
            if request.wants_deleted_fields
            else ()
        )
        columns = self._planner.plan(form, request.fields, request.additional_info, stored_ids)

        job_id = self.new_job_id(request)
        sink = self._sinks.for_format(request.format)
        handle = await sink.open(job_id, columns)

        state = ExportState(
            job_id=job_id,
            request=request,
            form=form,
            columns=columns,
            count=count,
            sink=handle,
            created_at=self._clock.now(),
        )
        await self._save(state)

        with job_context(job_id):
            _log.info(
                "export.started",
                form_id=form.form_id,
                count=count,
                total_steps=state.total_steps,
                columns=len(columns),
                format=request.format.value,
            )
        return StartResult(job_id=job_id, count=count, total_steps=state.total_steps, columns=columns)

    async def step(self, job_id: str | None) -> StepResult:
        if not job_id:
            raise UnknownRequestError(job_id)
        with job_context(job_id):
            try:
                async with self._guard.hold(job_id):
                    return await self._step(job_id)
            except ExportError as exc:
                _log.warning("export.step_failed", code=exc.code, error=exc.message)
                raise

    async def run(
        self,
        *,
        request_id: str | None = None,
        request: ExportRequest | None = None,
    ) -> StartResult | StepResult:
        """Step an existing job when *request_id* is given, else start *request*."""
        if request_id:
            return await self.step(request_id)
        if request is None or not request.criteria.form_id:
            raise MissingFormIdentifierError()
        return await self.start(request)

    async def state(self, job_id: str) -> ExportState:
        return await self._load(job_id)

    async def artifact(self, job_id: str) -> ExportState:
        """State of a finished job; its ``location`` addresses the artifact."""
        state = await self._load(job_id)
        if not state.is_complete or state.location is None:
            raise ExportError(f"Export '{job_id}' is not complete yet.", code="export_incomplete")
        return state

    def new_job_id(self, request: ExportRequest) -> str:
        canonical = json.dumps(request.normalized(), sort_keys=True, default=str)
        digest = hashlib.sha256(f"{canonical}{self._clock.time_ns()}".encode())
        return digest.hexdigest()[:32]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _step(self, job_id: str) -> StepResult:
        state = await self._load(job_id)
        if state.is_complete:
            return self._result(state, written=0)

        sink = self._sinks.for_format(state.sink.format)
        written = 0
        await self._sink_call(sink.rollback(state.sink))
        if not state.is_exhausted:
            entries = await self._fetch(state)
            rows = await self._format(state, entries)
            handle = await self._sink_call(sink.append_rows(state.sink, state.columns, rows))
            written = len(rows)
            state = state.advance(handle)
        if state.is_exhausted:
            state = state.complete(await self._sink_call(sink.finalize(state.sink, state.columns)))

        await self._save(state)

        if state.is_complete:
            await self._sink_call(sink.cleanup(state.sink))
            _log.info("export.completed", count=state.count, location=state.location)
        else:
            _log.info("export.step", step=state.current_step, total_steps=state.total_steps, written=written)
        return self._result(state, written=written)

    async def _fetch(self, state: ExportState) -> list[Any]:
        try:
            page = await self._fetcher.fetch(state.request.criteria, state.offset, state.page_size)
        except ExportError:
            raise
        except Exception as exc:
            raise EntryFetchError(f"Could not read entries: {exc}", cause=exc) from exc
        return page.entries

    @staticmethod
    async def _sink_call(call: Awaitable[T]) -> T:
        try:
            return await call
        except ExportError:
            raise
        except Exception as exc:
            raise DownstreamWriteError(f"Could not write export file: {exc}", cause=exc) from exc

    async def _format(self, state: ExportState, entries: list[Any]) -> list[dict[str, str]]:
        formatter = RowFormatter(state.form, self._context, self._sources, self._handlers)
        try:
            return await formatter.format_page(
                entries,
                state.columns,
                wants_deleted_fields=state.request.wants_deleted_fields,
            )
        except ExportError:
            raise
        except Exception as exc:
            raise ExportError(
                f"Could not format entries: {exc}", code="row_formatting_failed", cause=exc
            ) from exc

    @staticmethod
    def _result(state: ExportState, *, written: int) -> StepResult:
        return StepResult(
            job_id=state.job_id,
            step=state.current_step,
            total_steps=state.total_steps,
            count=state.count,
            written=written,
            is_final=state.is_complete,
            location=state.location,
        )

    async def _load_form(self, form_id: int | None) -> FormSchema:
        if not form_id:
            raise MissingFormIdentifierError()
        form = await self._entries.fetch_form(int(form_id))
        if form is None:
            raise FormDataMissingError(int(form_id))
        return form

    async def _load(self, job_id: str) -> ExportState:
        data = await self._store.get(STATE_KEY_PREFIX + job_id)
        if data is None:
            raise UnknownRequestError(job_id)
        try:
            return ExportState.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise UnknownRequestError(job_id, cause=exc) from exc

    async def _save(self, state: ExportState) -> None:
        try:
            await self._store.set(
                STATE_KEY_PREFIX + state.job_id,
                state.to_dict(),
                self._settings.request_data_ttl,
            )
        except ExportError:
            raise
        except Exception as exc:
            raise ExportError(
                f"Could not persist export state: {exc}", code="state_persist_failed", cause=exc
            ) from exc
