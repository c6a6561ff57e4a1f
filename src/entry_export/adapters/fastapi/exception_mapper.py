"""FastAPI adapter – ExportExceptionMapper turns export errors into failure envelopes."""
from __future__ import annotations

import traceback
from typing import Any, Callable

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from entry_export.kernel.errors import (
    DownstreamWriteError,
    EntryFetchError,
    ExportError,
    FormDataMissingError,
    MissingFormIdentifierError,
    SecurityCheckFailedError,
    StepInProgressError,
    UnknownRequestError,
)
from entry_export.observability.logging import get_logger

__all__ = ["COMMON_ERROR", "ExportExceptionMapper", "failure_message"]

COMMON_ERROR = "There was a problem while performing the export."

_log = get_logger(__name__)


def failure_message(exc: BaseException, *, debug: bool = False, common: str = COMMON_ERROR) -> str:
    """Common prefix, the error's own message, and a traceback in debug mode."""
    message = getattr(exc, "message", None) or str(exc)
    error = f"{common}\n{message}"
    if debug:
        error += "\nDEBUG: " + "".join(traceback.format_exception(exc))
    return error


class ExportExceptionMapper:
    """Register export error → HTTP status-code mappings on a FastAPI app.

    Error body schema::

        {"success": false, "data": {"error": "...", "code": "unknown_request"}}

    Mappings
    --------
    ``SecurityCheckFailedError``   → 403
    ``MissingFormIdentifierError`` → 400
    ``UnknownRequestError``        → 404
    ``FormDataMissingError``       → 404
    ``StepInProgressError``        → 409
    ``EntryFetchError``            → 502
    ``DownstreamWriteError``       → 500
    ``ExportError``                → 500
    """

    def __init__(self, *, debug: bool = False, common: str = COMMON_ERROR) -> None:
        self._debug = debug
        self._common = common
        # ORDER MATTERS: more-specific subtypes first
        self._map: list[tuple[type[Exception], int]] = [
            (SecurityCheckFailedError, 403),
            (MissingFormIdentifierError, 400),
            (UnknownRequestError, 404),
            (FormDataMissingError, 404),
            (StepInProgressError, 409),
            (EntryFetchError, 502),
            (DownstreamWriteError, 500),
            (ExportError, 500),
        ]

    def status_for(self, exc: BaseException) -> int:
        if isinstance(exc, RequestValidationError):
            return 400
        for exc_type, status in self._map:
            if isinstance(exc, exc_type):
                return status
        return 500

    def render(self, exc: BaseException) -> JSONResponse:
        if isinstance(exc, ExportError):
            code = exc.code
        elif isinstance(exc, RequestValidationError):
            code = "invalid_request"
        else:
            code = "error"
        body = {
            "success": False,
            "data": {
                "error": failure_message(exc, debug=self._debug, common=self._common),
                "code": code,
            },
        }
        return JSONResponse(status_code=self.status_for(exc), content=body)

    def _handler(self, status: int) -> Callable[[Any, Any], Any]:
        def handler(request: Any, exc: Any) -> Any:  # noqa: ARG001
            if status >= 500:
                _log.error("export.request_failed", code=getattr(exc, "code", "error"), error=str(exc))
            return self.render(exc)

        return handler

    def register(self, app: Any) -> None:
        """Register all error handlers on a ``FastAPI`` or ``Starlette`` app."""
        for exc_type, status in self._map:
            app.add_exception_handler(exc_type, self._handler(status))
        app.add_exception_handler(RequestValidationError, self._handler(400))
