"""Export errors – every failure the export pipeline reports to a caller."""

from __future__ import annotations

from typing import Any

from entry_export.kernel.errors.base import BaseError


class ExportError(BaseError):
    """Any failure raised while describing, starting or stepping an export."""

    default_code = "export_error"


class SecurityCheckFailedError(ExportError):
    """The caller failed the authorization hook."""

    default_code = "security_check_failed"

    def __init__(self, message: str = "Security check failed.", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class MissingFormIdentifierError(ExportError):
    """Neither ``form_id`` nor ``request_id`` was supplied."""

    default_code = "unknown_form_id"

    def __init__(self, message: str = "Unknown form ID.", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class UnknownRequestError(ExportError):
    """The job id is unknown or its state has expired."""

    default_code = "unknown_request"

    def __init__(
        self,
        job_id: str | None = None,
        message: str = "Unknown request.",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.job_id = job_id


class FormDataMissingError(ExportError):
    """The form schema could not be loaded."""

    default_code = "form_data"

    def __init__(
        self,
        form_id: int | None = None,
        message: str = "Form data is empty.",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.form_id = form_id


class DownstreamWriteError(ExportError):
    """The file sink failed to write, roll back or finalize an artifact."""

    default_code = "downstream_write_failure"


class EntryFetchError(ExportError):
    """The entry store failed to return a page of entries."""

    default_code = "entry_fetch_failure"


class StepInProgressError(ExportError):
    """Another step for the same job is already running."""

    default_code = "step_in_progress"

    def __init__(self, job_id: str, **kwargs: Any) -> None:
        super().__init__(f"A step for export '{job_id}' is already running.", **kwargs)
        self.job_id = job_id


__all__ = [
    "DownstreamWriteError",
    "EntryFetchError",
    "ExportError",
    "FormDataMissingError",
    "MissingFormIdentifierError",
    "SecurityCheckFailedError",
    "StepInProgressError",
    "UnknownRequestError",
]
