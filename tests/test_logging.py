"""Tests for the structured logging system (hr_kernel/logging_config.py)."""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from hr_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "hr_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("payroll_run_previewed", extra={"lines": 12, "is_partial": False})

        record = _parse_log(stream)
        assert record["lines"] == 12
        assert record["is_partial"] is False

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(actor_id="hr-admin", pay_period="2025-10")
        get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["actor_id"] == "hr-admin"
        assert record["pay_period"] == "2025-10"

    def test_engine_exception_fields_extracted(self):
        """HrEngineError subclasses carry .code and their context attributes."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        from hr_kernel.exceptions import StaleStreakError

        try:
            raise StaleStreakError("S1", 2, 3)
        except StaleStreakError:
            get_logger("test").error("finalize_failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "STALE_STREAK"
        assert record["exc_type"] == "StaleStreakError"
        assert record["exc_staff_id"] == "S1"
        assert record["exc_expected"] == 2
        assert record["exc_actual"] == 3
        assert "traceback" in record

    def test_decimal_date_and_uuid_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        uid = uuid4()
        get_logger("test").info("typed", extra={
            "amount": Decimal("967.74"),
            "day": date(2025, 10, 1),
            "run": uid,
        })

        record = _parse_log(stream)
        assert record["amount"] == "967.74"
        assert record["day"] == "2025-10-01"
        assert record["run"] == str(uid)

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("bare_message")

        record = _parse_log(stream)
        assert "actor_id" not in record
        assert "staff_id" not in record

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # default level is INFO, so the debug line is dropped
        assert len(logs) == 2
        for record in logs:
            assert {"ts", "level", "logger", "message"} <= record.keys()


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(staff_id="S1", run_id="r1")
        assert LogContext.get_all() == {"staff_id": "S1", "run_id": "r1"}

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(pay_period="2025-09")
        with LogContext.bind(pay_period="2025-10"):
            assert LogContext.get_all()["pay_period"] == "2025-10"
        assert LogContext.get_all()["pay_period"] == "2025-09"

    def test_bind_restores_none(self):
        assert "staff_id" not in LogContext.get_all()
        with LogContext.bind(staff_id="S1"):
            assert LogContext.get_all()["staff_id"] == "S1"
        assert "staff_id" not in LogContext.get_all()

    def test_bind_ignores_unknown_fields(self):
        with LogContext.bind(staff_id="S1", tenant="x"):
            assert LogContext.get_all() == {"staff_id": "S1"}

    def test_all_fields(self):
        LogContext.set(
            correlation_id="c",
            actor_id="a",
            staff_id="s",
            run_id="r",
            pay_period="p",
        )
        assert len(LogContext.get_all()) == 5


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op
        handlers = logging.getLogger("hr_kernel").handlers
        assert h1 in handlers
        assert h2 not in handlers

    def test_get_logger_returns_child(self):
        assert get_logger("modules.payroll.service").name == "hr_kernel.modules.payroll.service"

    def test_logger_hierarchy(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        get_logger("deep.nested.module").debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["logger"] == "hr_kernel.deep.nested.module"
