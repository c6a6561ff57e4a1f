"""Application export – FormattingContext resolved once per job."""
from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta
from typing import Callable

from entry_export.config import ExportSettings

__all__ = ["FormattingContext"]


def _identity(text: str) -> str:
    return text


@dataclasses.dataclass(frozen=True)
class FormattingContext:
    """Site-level formatting inputs: date pattern, GMT offset, map zoom, locale."""

    datetime_format: str = "%B %d, %Y %I:%M %p"
    gmt_offset_seconds: int = 0
    map_zoom: int = 6
    translate: Callable[[str], str] = _identity

    @classmethod
    def from_settings(
        cls,
        settings: ExportSettings,
        translate: Callable[[str], str] | None = None,
    ) -> "FormattingContext":
        return cls(
            datetime_format=settings.datetime_format,
            gmt_offset_seconds=int(settings.gmt_offset * 3600),
            map_zoom=settings.map_zoom,
            translate=translate or _identity,
        )

    def format_datetime(self, value: datetime) -> str:
        return (value + timedelta(seconds=self.gmt_offset_seconds)).strftime(self.datetime_format)
