"""FastAPI adapter – application factory."""
from __future__ import annotations

from fastapi import FastAPI

from entry_export import __version__
from entry_export.adapters.fastapi.exception_mapper import ExportExceptionMapper
from entry_export.adapters.fastapi.routers import Authorizer, ExportRouter
from entry_export.application.export import ExportJob


def create_app(job: ExportJob, *, authorize: Authorizer | None = None) -> FastAPI:
    """Build the export service with routes and error envelopes registered."""
    app = FastAPI(title="entry-export", version=__version__)
    app.include_router(ExportRouter(job, authorize=authorize))
    ExportExceptionMapper(debug=job.settings.debug).register(app)
    return app


__all__ = ["create_app"]
