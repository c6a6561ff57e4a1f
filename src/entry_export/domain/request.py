"""Domain – export request and filter criteria."""
from __future__ import annotations

import dataclasses
from datetime import datetime
from enum import Enum
from typing import Any, Mapping

from entry_export.domain.entries import parse_datetime

__all__ = ["DELETED_FIELDS_MARKER", "ExportCriteria", "ExportFormat", "ExportRequest", "SearchFilter"]

DELETED_FIELDS_MARKER = "del_fields"


class ExportFormat(str, Enum):
    CSV = "csv"
    XLSX = "xlsx"

    @property
    def extension(self) -> str:
        return f".{self.value}"


@dataclasses.dataclass(frozen=True)
class SearchFilter:
    """Match entries whose field value compares against ``value``."""

    value: str
    field_id: str | None = None
    comparison: str = "contains"

    COMPARISONS = ("contains", "contains_not", "is", "is_not")

    def __post_init__(self) -> None:
        if self.comparison not in self.COMPARISONS:
            raise ValueError(f"Unsupported search comparison: {self.comparison!r}")


@dataclasses.dataclass(frozen=True)
class ExportCriteria:
    """Which entries of a form to export."""

    form_id: int | None = None
    entry_ids: tuple[int, ...] = ()
    date_from: datetime | None = None
    date_to: datetime | None = None
    search: SearchFilter | None = None

    @property
    def is_filtered(self) -> bool:
        """True for a single-entry (or explicit entry list) export."""
        return bool(self.entry_ids)

    def to_dict(self) -> dict[str, Any]:
        return {
            "form_id": self.form_id,
            "entry_ids": list(self.entry_ids),
            "date_from": self.date_from.isoformat() if self.date_from else None,
            "date_to": self.date_to.isoformat() if self.date_to else None,
            "search": dataclasses.asdict(self.search) if self.search else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExportCriteria":
        search = data.get("search")
        return cls(
            form_id=int(data["form_id"]) if data.get("form_id") is not None else None,
            entry_ids=tuple(int(i) for i in data.get("entry_ids") or ()),
            date_from=parse_datetime(data["date_from"]) if data.get("date_from") else None,
            date_to=parse_datetime(data["date_to"]) if data.get("date_to") else None,
            search=SearchFilter(**search) if search else None,
        )


@dataclasses.dataclass(frozen=True)
class ExportRequest:
    """Immutable description of one export, fixed at job start."""

    criteria: ExportCriteria
    fields: tuple[str, ...] = ()
    additional_info: tuple[str, ...] = ()
    format: ExportFormat = ExportFormat.CSV
    page_size: int = 5000

    def __post_init__(self) -> None:
        if self.page_size <= 0:
            raise ValueError("page_size must be positive")
        object.__setattr__(self, "fields", tuple(str(f) for f in self.fields))
        object.__setattr__(self, "additional_info", tuple(str(a) for a in self.additional_info))
        object.__setattr__(self, "format", ExportFormat(self.format))

    @property
    def wants_deleted_fields(self) -> bool:
        return DELETED_FIELDS_MARKER in self.additional_info

    def normalized(self) -> dict[str, Any]:
        """Canonical, JSON-serialisable form (stable key order when dumped sorted)."""
        return {
            "criteria": self.criteria.to_dict(),
            "fields": list(self.fields),
            "additional_info": list(self.additional_info),
            "format": self.format.value,
            "page_size": self.page_size,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExportRequest":
        return cls(
            criteria=ExportCriteria.from_dict(data["criteria"]),
            fields=tuple(data.get("fields") or ()),
            additional_info=tuple(data.get("additional_info") or ()),
            format=ExportFormat(data.get("format") or ExportFormat.CSV.value),
            page_size=int(data["page_size"]),
        )
