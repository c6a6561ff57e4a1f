"""Application export – ColumnPlanner builds the ordered column set of a job."""
from __future__ import annotations

import html
import re
from typing import Callable, Iterable, Sequence

from entry_export.config.settings import DEFAULT_DISALLOWED_FIELDS
from entry_export.domain import DELETED_FIELDS_MARKER, ColumnPlan, Field, FormSchema

__all__ = [
    "ADDITIONAL_INFO_LABELS",
    "DELETED_FIELD_PREFIX",
    "PAYMENT_COLUMNS",
    "ColumnPlanner",
    "Translator",
    "strip_tags",
]

Translator = Callable[[str], str]

DELETED_FIELD_PREFIX = "del_field_"

ADDITIONAL_INFO_LABELS: dict[str, str] = {
    "entry_id": "Entry ID",
    "date": "Entry Date",
    "notes": "Entry Notes",
    "status": "Entry Status",
    "viewed": "Viewed",
    "starred": "Starred",
    "user_agent": "User Agent",
    "ip_address": "User IP",
    "user_uuid": "Unique Generated User ID",
    "geodata": "Geolocation Details",
    "pstatus": "Payment Status",
    "pginfo": "Payment Gateway Information",
    DELETED_FIELDS_MARKER: "Include data of previously deleted fields",
}

PAYMENT_COLUMNS: frozenset[str] = frozenset({"pstatus", "pginfo"})

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)[^>]*?>.*?</\1>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")


def strip_tags(text: str) -> str:
    """Remove markup (and script/style bodies) and trim surrounding whitespace."""
    text = _SCRIPT_STYLE_RE.sub("", text)
    text = _TAG_RE.sub("", text)
    return html.unescape(text).strip()


def _identity(text: str) -> str:
    return text


class ColumnPlanner:
    """Compute the columns of an export.

    Selected fields come first in caller order, then additional-info columns
    in caller order, with deleted-field columns expanded in place of the
    ``del_fields`` marker.  Fields of a disallowed type never appear.
    """

    def __init__(
        self,
        disallowed_types: Iterable[str] = DEFAULT_DISALLOWED_FIELDS,
        translate: Translator | None = None,
    ) -> None:
        self._disallowed = frozenset(disallowed_types)
        self._t = translate or _identity

    def field_label(self, field: Field) -> str:
        label = strip_tags(field.label) if field.label else ""
        if not label:
            return self._t("Field #{id}").format(id=field.id)
        return label

    def deleted_field_label(self, field_id: str) -> str:
        return self._t("Deleted field #{id}").format(id=field_id)

    def is_allowed(self, field: Field) -> bool:
        return field.type not in self._disallowed

    def describe_fields(self, form: FormSchema) -> list[Field]:
        """Exportable fields of *form* with display labels resolved."""
        return [
            Field(id=f.id, type=f.type, label=self.field_label(f))
            for f in form.fields
            if self.is_allowed(f)
        ]

    def available_additional_info(self, form: FormSchema) -> list[str]:
        """Every additional-info id that makes sense for *form*."""
        return [
            col_id
            for col_id in ADDITIONAL_INFO_LABELS
            if form.supports_payments or col_id not in PAYMENT_COLUMNS
        ]

    def additional_info_label(self, col_id: str) -> str:
        label = ADDITIONAL_INFO_LABELS.get(col_id)
        if label is None:
            label = col_id.replace("_", " ").replace("-", " ").title()
        return self._t(label)

    def deleted_field_ids(
        self,
        form: FormSchema,
        selected_field_ids: Sequence[str],
        stored_field_ids: Iterable[str] = (),
    ) -> list[str]:
        """Field ids with data or a request but no live schema definition."""
        live = set(form.field_ids())
        deleted: list[str] = []
        for field_id in selected_field_ids:
            field_id = str(field_id)
            if field_id.isdigit() and field_id not in live and field_id not in deleted:
                deleted.append(field_id)
        stored = sorted(
            {str(f) for f in stored_field_ids if str(f).isdigit()} - live - set(deleted),
            key=int,
        )
        return deleted + stored

    def plan(
        self,
        form: FormSchema,
        selected_field_ids: Sequence[str],
        additional_info_ids: Sequence[str],
        stored_field_ids: Iterable[str] = (),
    ) -> ColumnPlan:
        labels = {f.id: self.field_label(f) for f in form.fields if self.is_allowed(f)}
        columns: dict[str, str] = {}

        for field_id in selected_field_ids:
            field_id = str(field_id)
            if field_id in labels and field_id not in columns:
                columns[field_id] = labels[field_id]

        for col_id in additional_info_ids:
            col_id = str(col_id)
            if col_id == DELETED_FIELDS_MARKER:
                for field_id in self.deleted_field_ids(form, selected_field_ids, stored_field_ids):
                    columns.setdefault(
                        f"{DELETED_FIELD_PREFIX}{field_id}", self.deleted_field_label(field_id)
                    )
                continue
            if col_id in PAYMENT_COLUMNS and not form.supports_payments:
                continue
            columns.setdefault(col_id, self.additional_info_label(col_id))

        return ColumnPlan.of(columns)
