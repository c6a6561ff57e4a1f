"""Config settings – Settings base class and ExportSettings."""
from __future__ import annotations

import dataclasses
from typing import ClassVar

from entry_export.config.errors import InvalidSettingValueError

DEFAULT_DISALLOWED_FIELDS: frozenset[str] = frozenset(
    {
        "captcha",
        "content",
        "divider",
        "html",
        "internal-information",
        "layout",
        "pagebreak",
    }
)


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings."""

    _prefix: ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""


@dataclasses.dataclass
class ExportSettings(Settings):
    """Tunables of the export pipeline.

    ``date_format`` and ``time_format`` are ``strftime`` patterns joined with
    a space to render entry and note dates; ``gmt_offset`` is in hours.
    """

    _prefix: ClassVar[str] = "ENTRY_EXPORT"

    entries_per_step: int = 5000
    request_data_ttl: int = 86400
    output_dir: str = "exports"
    disallowed_fields: frozenset[str] = DEFAULT_DISALLOWED_FIELDS
    date_format: str = "%B %d, %Y"
    time_format: str = "%I:%M %p"
    gmt_offset: float = 0.0
    map_zoom: int = 6
    csv_bom: bool = False
    debug: bool = False

    def _validate(self) -> None:
        if self.entries_per_step <= 0:
            raise InvalidSettingValueError("entries_per_step", "must be positive")
        if self.request_data_ttl <= 0:
            raise InvalidSettingValueError("request_data_ttl", "must be positive")
        self.disallowed_fields = frozenset(self.disallowed_fields)

    @property
    def datetime_format(self) -> str:
        return f"{self.date_format} {self.time_format}"


__all__ = ["DEFAULT_DISALLOWED_FIELDS", "ExportSettings", "Settings"]
