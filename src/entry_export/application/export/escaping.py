"""Application export – spreadsheet-safe cell values."""
from __future__ import annotations

import re
from datetime import datetime
from typing import Any

__all__ = ["ACTIVE_CONTENT_TRIGGERS", "escape_value"]

ACTIVE_CONTENT_TRIGGERS: tuple[str, ...] = ("=", "+", "-", "@", "\t", "\r")
"""Leading characters that make spreadsheet software evaluate a cell."""

# XML 1.0 forbids these; openpyxl refuses to write them.
_ILLEGAL_CHARACTERS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def escape_value(value: Any) -> str:
    """Convert *value* into text that cannot break out of its cell.

    Cells starting with a formula trigger are prefixed with ``'``.  Quotes,
    delimiters and embedded newlines are left to the CSV writer's quoting.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        text = "1" if value else ""
    elif isinstance(value, datetime):
        text = value.isoformat(sep=" ")
    elif isinstance(value, (list, tuple)):
        text = "\n".join(str(v) for v in value)
    else:
        text = str(value)
    text = _ILLEGAL_CHARACTERS_RE.sub("", text)
    if text.startswith(ACTIVE_CONTENT_TRIGGERS):
        return f"'{text}"
    return text
