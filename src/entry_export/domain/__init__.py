"""Domain – forms, entries, export requests and export state."""
from entry_export.domain.entries import (
    PAYMENT_FIELD_TYPES,
    Author,
    Entry,
    EntryNote,
    Field,
    FormSchema,
    Location,
    Payment,
    PaymentMeta,
)
from entry_export.domain.request import (
    DELETED_FIELDS_MARKER,
    ExportCriteria,
    ExportFormat,
    ExportRequest,
    SearchFilter,
)
from entry_export.domain.state import (
    ColumnPlan,
    ExportState,
    ExportStatus,
    Row,
    SinkHandle,
    total_steps_for,
)

__all__ = [
    "DELETED_FIELDS_MARKER",
    "PAYMENT_FIELD_TYPES",
    "Author",
    "ColumnPlan",
    "Entry",
    "EntryNote",
    "ExportCriteria",
    "ExportFormat",
    "ExportRequest",
    "ExportState",
    "ExportStatus",
    "Field",
    "FormSchema",
    "Location",
    "Payment",
    "PaymentMeta",
    "Row",
    "SearchFilter",
    "SinkHandle",
    "total_steps_for",
]
