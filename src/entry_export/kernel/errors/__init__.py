"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    └── ExportError
        ├── SecurityCheckFailedError
        ├── MissingFormIdentifierError
        ├── UnknownRequestError
        ├── FormDataMissingError
        ├── DownstreamWriteError
        ├── EntryFetchError
        └── StepInProgressError
"""

from entry_export.kernel.errors.base import BaseError
from entry_export.kernel.errors.export import (
    DownstreamWriteError,
    EntryFetchError,
    ExportError,
    FormDataMissingError,
    MissingFormIdentifierError,
    SecurityCheckFailedError,
    StepInProgressError,
    UnknownRequestError,
)

__all__ = [
    "BaseError",
    "DownstreamWriteError",
    "EntryFetchError",
    "ExportError",
    "FormDataMissingError",
    "MissingFormIdentifierError",
    "SecurityCheckFailedError",
    "StepInProgressError",
    "UnknownRequestError",
]
