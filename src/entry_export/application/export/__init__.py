"""Application export – resumable, multi-step entry export."""
from entry_export.application.export.additional_info import (
    DEFAULT_HANDLERS,
    AdditionalInfoHandler,
    FormatScope,
    InfoSources,
    format_amount,
    ucwords,
)
from entry_export.application.export.columns import (
    ADDITIONAL_INFO_LABELS,
    DELETED_FIELD_PREFIX,
    PAYMENT_COLUMNS,
    ColumnPlanner,
    strip_tags,
)
from entry_export.application.export.context import FormattingContext
from entry_export.application.export.escaping import ACTIVE_CONTENT_TRIGGERS, escape_value
from entry_export.application.export.fetcher import FetchedPage, PageFetcher
from entry_export.application.export.formatting import RowFormatter
from entry_export.application.export.job import (
    STATE_KEY_PREFIX,
    ExportJob,
    SingleFlight,
    StartResult,
    StepResult,
)
from entry_export.application.export.ports import (
    EntryMetaStore,
    EntryStore,
    PaymentMetaStore,
    PaymentStore,
    StateStore,
    StepGuard,
    UserDirectory,
)
from entry_export.application.export.sinks import CsvFileSink, FileSink, SinkRegistry, XlsxFileSink

__all__ = [
    "ACTIVE_CONTENT_TRIGGERS",
    "ADDITIONAL_INFO_LABELS",
    "DEFAULT_HANDLERS",
    "DELETED_FIELD_PREFIX",
    "PAYMENT_COLUMNS",
    "STATE_KEY_PREFIX",
    "AdditionalInfoHandler",
    "ColumnPlanner",
    "CsvFileSink",
    "EntryMetaStore",
    "EntryStore",
    "ExportJob",
    "FetchedPage",
    "FileSink",
    "FormatScope",
    "FormattingContext",
    "InfoSources",
    "PageFetcher",
    "PaymentMetaStore",
    "PaymentStore",
    "RowFormatter",
    "SingleFlight",
    "SinkRegistry",
    "StartResult",
    "StateStore",
    "StepGuard",
    "StepResult",
    "UserDirectory",
    "XlsxFileSink",
    "escape_value",
    "format_amount",
    "strip_tags",
    "ucwords",
]
