"""Unit tests for export logging – structlog events and job context."""
from __future__ import annotations

import asyncio
import io
import json
import logging

import pytest
import structlog
from structlog.testing import capture_logs

from entry_export.observability.logging import configure_logging, get_logger, job_context
from entry_export.observability.logging.factory import HANDLER_NAME


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJobContext:
    def test_binds_and_unbinds_job_id(self) -> None:
        with job_context("job-1", step=2) as bound:
            assert bound == {"job_id": "job-1", "step": 2}
            assert structlog.contextvars.get_contextvars() == {"job_id": "job-1", "step": 2}
        assert "job_id" not in structlog.contextvars.get_contextvars()

    def test_get_logger_binds_initial_values(self) -> None:
        with capture_logs() as logs:
            get_logger("t", component="export").info("hello")
        assert logs == [{"event": "hello", "log_level": "info", "component": "export"}]


class TestConfigureLogging:
    def test_json_output(self, restore_logging) -> None:
        stream = io.StringIO()
        configure_logging(logging.INFO, json=True, stream=stream)
        with job_context("job-9"):
            get_logger("entry_export.test").info("export.step", written=5)
        line = stream.getvalue().strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["event"] == "export.step"
        assert payload["written"] == 5
        assert payload["job_id"] == "job-9"
        assert payload["level"] == "info"
        assert payload["logger"] == "entry_export.test"

    def test_level_name_and_single_handler(self, restore_logging) -> None:
        configure_logging("warning", json=False)
        configure_logging("warning", json=False)
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert [h.get_name() for h in root.handlers].count(HANDLER_NAME) == 1

    def test_stdlib_records_share_the_format(self, restore_logging) -> None:
        stream = io.StringIO()
        configure_logging(logging.INFO, stream=stream)
        logging.getLogger("plain").warning("disk %s", "low")
        payload = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert payload["event"] == "disk low"
        assert payload["level"] == "warning"


class TestExportEvents:
    def test_start_step_and_completion_are_logged(self, make_harness) -> None:
        async def _run():
            h = make_harness(entries=60)
            started = await h.job.start(h.request())
            await h.job.step(started.job_id)
            await h.job.step(started.job_id)
            return started

        with capture_logs() as logs:
            started = asyncio.run(_run())

        events = [entry["event"] for entry in logs]
        assert events == ["export.started", "export.step", "export.completed"]
        assert logs[0]["count"] == 60
        assert logs[0]["total_steps"] == 2
        assert logs[0]["format"] == "csv"
        assert logs[2]["location"].endswith(f"{started.job_id}.csv")

    def test_failed_step_is_logged(self, make_harness) -> None:
        async def _run():
            h = make_harness()
            with pytest.raises(Exception):
                await h.job.step("missing")

        with capture_logs() as logs:
            asyncio.run(_run())
        assert logs[-1]["event"] == "export.step_failed"
        assert logs[-1]["code"] == "unknown_request"
        assert logs[-1]["log_level"] == "warning"
