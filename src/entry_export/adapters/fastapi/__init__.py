"""FastAPI adapter – export routes, error envelopes and app factory."""
from entry_export.adapters.fastapi.app import create_app
from entry_export.adapters.fastapi.exception_mapper import (
    COMMON_ERROR,
    ExportExceptionMapper,
    failure_message,
)
from entry_export.adapters.fastapi.routers import Authorizer, ExportRouter
from entry_export.adapters.fastapi.schemas import StepBody

__all__ = [
    "COMMON_ERROR",
    "Authorizer",
    "ExportExceptionMapper",
    "ExportRouter",
    "StepBody",
    "create_app",
    "failure_message",
]
