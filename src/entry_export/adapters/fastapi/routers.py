"""FastAPI adapter – ExportRouter exposes the export job over HTTP."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Awaitable, Callable

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse

from entry_export.adapters.fastapi.schemas import FormDataBody, StepBody
from entry_export.application.export import ExportJob
from entry_export.domain import ExportFormat
from entry_export.kernel.errors import DownstreamWriteError, ExportError, SecurityCheckFailedError

__all__ = ["Authorizer", "ExportRouter"]

Authorizer = Callable[[Request], Awaitable[bool]]

_MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def _success(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}


def ExportRouter(
    job: ExportJob,
    *,
    prefix: str = "/entries/export",
    authorize: Authorizer | None = None,
    tags: list[str] | None = None,
) -> APIRouter:
    """Return the describe-columns, step and download routes for *job*.

    Parameters
    ----------
    job:
        The :class:`ExportJob` serving every request.
    authorize:
        Optional async check run before each route; ``False`` fails the
        request with :class:`SecurityCheckFailedError`.
    """

    async def security_check(request: Request) -> None:
        if authorize is not None and not await authorize(request):
            raise SecurityCheckFailedError()

    router = APIRouter(prefix=prefix, tags=tags or ["export"], dependencies=[Depends(security_check)])

    @router.post("/form-data")
    async def form_data(body: FormDataBody) -> dict[str, Any]:
        """Exportable fields of a form."""
        fields = await _guarded(job.describe_columns(body.form_id))
        return _success({"fields": [f.to_dict() for f in fields]})

    @router.post("/step")
    async def export_step(body: StepBody) -> dict[str, Any]:
        """Start a job (``form_id``) or run its next step (``request_id``)."""
        request = None
        if not body.request_id and body.form_id:
            request = body.to_export_request(job.settings.entries_per_step)
        result = await _guarded(job.run(request_id=body.request_id, request=request))
        return _success(result.to_dict())

    @router.get("/{job_id}/download")
    async def download(job_id: str) -> FileResponse:
        state = await _guarded(job.artifact(job_id))
        path = Path(state.location or "")
        if not path.is_file():
            raise DownstreamWriteError(f"Export file for '{job_id}' is missing.")
        return FileResponse(
            path,
            media_type=_MEDIA_TYPES[state.sink.format],
            filename=f"entries-{state.form.form_id}{state.sink.format.extension}",
        )

    return router


async def _guarded(awaitable: Awaitable[Any]) -> Any:
    """Await *awaitable*, wrapping anything but an :class:`ExportError`."""
    try:
        return await awaitable
    except ExportError:
        raise
    except Exception as exc:
        raise ExportError(str(exc) or type(exc).__name__, code="internal_error", cause=exc) from exc
