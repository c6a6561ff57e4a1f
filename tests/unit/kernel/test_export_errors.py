"""Unit tests for the kernel error hierarchy and clocks."""
from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta

import pytest

from entry_export.kernel.errors import (
    BaseError,
    DownstreamWriteError,
    EntryFetchError,
    ExportError,
    FormDataMissingError,
    MissingFormIdentifierError,
    SecurityCheckFailedError,
    StepInProgressError,
    UnknownRequestError,
)
from entry_export.kernel.time import FrozenClock, SystemClock


class TestBaseError:
    def test_defaults(self):
        err = BaseError("boom")
        assert str(err) == "boom"
        assert err.code == "error"
        assert err.detail == {}
        assert err.cause is None

    def test_cause_is_chained(self):
        cause = OSError("disk full")
        err = ExportError("write failed", cause=cause)
        assert err.__cause__ is cause
        assert err.to_dict()["cause"] == "OSError: disk full"

    def test_to_json(self):
        err = ExportError("nope", code="custom", detail={"step": 2})
        assert json.loads(err.to_json()) == {
            "type": "ExportError",
            "code": "custom",
            "message": "nope",
            "detail": {"step": 2},
        }

    def test_empty_detail_is_omitted(self):
        assert "detail" not in ExportError("nope").to_dict()


class TestExportErrors:
    @pytest.mark.parametrize(
        ("err", "code", "message"),
        [
            (SecurityCheckFailedError(), "security_check_failed", "Security check failed."),
            (MissingFormIdentifierError(), "unknown_form_id", "Unknown form ID."),
            (UnknownRequestError("abc"), "unknown_request", "Unknown request."),
            (FormDataMissingError(4), "form_data", "Form data is empty."),
            (DownstreamWriteError("disk"), "downstream_write_failure", "disk"),
            (EntryFetchError("db gone"), "entry_fetch_failure", "db gone"),
        ],
    )
    def test_codes_and_messages(self, err, code, message):
        assert isinstance(err, ExportError)
        assert err.code == code
        assert err.message == message

    def test_identifiers_are_kept(self):
        assert UnknownRequestError("abc").job_id == "abc"
        assert FormDataMissingError(4).form_id == 4

    def test_step_in_progress(self):
        err = StepInProgressError("job-1")
        assert err.job_id == "job-1"
        assert err.code == "step_in_progress"
        assert "job-1" in err.message


class TestClocks:
    def test_system_clock_is_utc(self):
        assert SystemClock().now().tzinfo is UTC

    def test_frozen_clock(self):
        fixed = datetime(2026, 1, 1, tzinfo=UTC)
        clock = FrozenClock(fixed)
        assert clock.now() == fixed
        assert clock.time_ns() != clock.time_ns()
        assert clock.advance(hours=1) == fixed + timedelta(hours=1)
        assert clock.timestamp() == fixed.timestamp() + 3600

    def test_frozen_clock_needs_aware_datetime(self):
        with pytest.raises(ValueError):
            FrozenClock(datetime(2026, 1, 1))
