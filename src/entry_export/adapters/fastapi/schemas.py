"""FastAPI adapter – request bodies of the export endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from entry_export.domain import ExportCriteria, ExportFormat, ExportRequest, SearchFilter

__all__ = ["DateRange", "FormDataBody", "SearchBody", "StepBody"]


class FormDataBody(BaseModel):
    form_id: int | None = None


class DateRange(BaseModel):
    date_from: datetime | None = Field(default=None, alias="from")
    date_to: datetime | None = Field(default=None, alias="to")

    model_config = {"populate_by_name": True}


class SearchBody(BaseModel):
    term: str = ""
    comparison: Literal["contains", "contains_not", "is", "is_not"] = "contains"
    field: str | None = None


class StepBody(BaseModel):
    """Either ``request_id`` (continue a job) or ``form_id`` (start one)."""

    request_id: str | None = None
    form_id: int | None = None
    entry_id: list[int] = Field(default_factory=list)
    fields: list[str] = Field(default_factory=list)
    additional_info: list[str] = Field(default_factory=list)
    export_options: list[ExportFormat] = Field(default_factory=list)
    dates: DateRange | None = None
    search: SearchBody | None = None

    @field_validator("entry_id", mode="before")
    @classmethod
    def _entry_ids(cls, value: object) -> object:
        if value is None or value == "":
            return []
        if isinstance(value, (int, str)):
            return [int(v) for v in str(value).split(",") if v.strip()]
        return value

    @field_validator("fields", "additional_info", mode="before")
    @classmethod
    def _ids(cls, value: object) -> object:
        if value is None:
            return []
        return [str(v) for v in value] if isinstance(value, (list, tuple)) else value

    def to_export_request(self, page_size: int) -> ExportRequest:
        search = None
        if self.search is not None and self.search.term != "":
            search = SearchFilter(
                value=self.search.term,
                field_id=self.search.field,
                comparison=self.search.comparison,
            )
        criteria = ExportCriteria(
            form_id=self.form_id,
            entry_ids=tuple(self.entry_id),
            date_from=self.dates.date_from if self.dates else None,
            date_to=self.dates.date_to if self.dates else None,
            search=search,
        )
        return ExportRequest(
            criteria=criteria,
            fields=tuple(self.fields),
            additional_info=tuple(self.additional_info),
            format=self.export_options[0] if self.export_options else ExportFormat.CSV,
            page_size=page_size,
        )
