"""Observability – structured logging helpers."""
from entry_export.observability.logging.factory import configure_logging
from entry_export.observability.logging.processors import get_logger, job_context

__all__ = ["configure_logging", "get_logger", "job_context"]
