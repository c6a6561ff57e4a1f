"""Application export – RowFormatter turns entries into escaped rows."""
from __future__ import annotations

from typing import Any, Iterable

from entry_export.application.export.additional_info import (
    DEFAULT_HANDLERS,
    AdditionalInfoHandler,
    FormatScope,
    InfoSources,
)
from entry_export.application.export.columns import DELETED_FIELD_PREFIX
from entry_export.application.export.context import FormattingContext
from entry_export.application.export.escaping import escape_value
from entry_export.domain import ColumnPlan, Entry, FormSchema, Row

__all__ = ["RowFormatter"]


class RowFormatter:
    """Format entries of one form against a :class:`ColumnPlan`.

    Digit column ids read the entry's field value, ``del_field_<id>`` reads
    the value of a field no longer in the schema, and every other id is
    dispatched to a registered handler or, failing that, read from the entry
    record itself.
    """

    def __init__(
        self,
        form: FormSchema,
        context: FormattingContext,
        sources: InfoSources,
        handlers: dict[str, AdditionalInfoHandler] | None = None,
    ) -> None:
        self._scope = FormatScope(form=form, context=context, sources=sources)
        self._handlers: dict[str, AdditionalInfoHandler] = dict(DEFAULT_HANDLERS)
        if handlers:
            self._handlers.update(handlers)

    def register(self, col_id: str, handler: AdditionalInfoHandler) -> None:
        self._handlers[col_id] = handler

    def skips_rows(self, wants_deleted_fields: bool) -> bool:
        """Rows are dropped for a form without fields unless deleted fields were asked for."""
        return not self._scope.form.fields and not wants_deleted_fields

    async def value(self, entry: Entry, col_id: str) -> Any:
        if col_id.isdigit():
            return entry.field_value(col_id)
        if col_id.startswith(DELETED_FIELD_PREFIX):
            return entry.field_value(col_id[len(DELETED_FIELD_PREFIX):])
        handler = self._handlers.get(col_id)
        if handler is not None:
            return await handler(entry, self._scope)
        return entry.get(col_id, "")

    async def format(self, entry: Entry, plan: ColumnPlan) -> Row:
        return {col_id: escape_value(await self.value(entry, col_id)) for col_id in plan}

    async def format_page(
        self,
        entries: Iterable[Entry],
        plan: ColumnPlan,
        *,
        wants_deleted_fields: bool = False,
    ) -> list[Row]:
        if self.skips_rows(wants_deleted_fields):
            return []
        return [await self.format(entry, plan) for entry in entries]
