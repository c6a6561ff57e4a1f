"""Observability – loggers and per-job log context."""
from __future__ import annotations

import contextlib
from typing import Any, Iterator

import structlog


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """structlog logger for *name*, with *initial_values* bound when given."""
    logger = structlog.get_logger(name)
    return logger.bind(**initial_values) if initial_values else logger


@contextlib.contextmanager
def job_context(job_id: str, **extra: Any) -> Iterator[dict[str, Any]]:
    """Tag every event logged inside the block with ``job_id`` and *extra*.

    Yields the bound values. Whatever was bound before is restored on exit,
    so a nested job never leaks its id into the outer one.
    """
    values = {"job_id": job_id, **extra}
    with structlog.contextvars.bound_contextvars(**values):
        yield values


__all__ = ["get_logger", "job_context"]
