"""
Pytest fixtures for the HR payroll engine test suite.

Provides:
- Structured logging configuration and a ``captured_logs`` fixture
- A deterministic clock and the business calendar
- An in-memory SQLite session with all tables created

Environment Variables:
- HR_TEST_DATABASE_URL: run the store-backed tests against another database
  (e.g. PostgreSQL).  Defaults to in-memory SQLite.
"""

import json
import logging
import os
from datetime import UTC, datetime
from io import StringIO

import pytest

from hr_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from hr_kernel.domain.calendar import BusinessCalendar
from hr_kernel.domain.clock import DeterministicClock
from hr_kernel.domain.policy import DEFAULT_POLICY
from hr_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

TEST_ACTOR_ID = "hr-admin"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture hr_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, service):
            service.preview_run(2025, 10)
            logs = captured_logs()
            assert any(r["message"] == "payroll_run_previewed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("hr_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Time fixtures
# =============================================================================


@pytest.fixture
def clock() -> DeterministicClock:
    """10:00 on 2025-11-05 in Bangkok: October 2025 is complete."""
    return DeterministicClock(datetime(2025, 11, 5, 3, 0, tzinfo=UTC))


@pytest.fixture
def calendar() -> BusinessCalendar:
    return BusinessCalendar.from_policy(DEFAULT_POLICY)


@pytest.fixture
def policy():
    return DEFAULT_POLICY


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def session():
    """A session on a fresh schema, torn down after the test."""
    init_engine_from_url(os.environ.get("HR_TEST_DATABASE_URL", "sqlite:///:memory:"))
    create_tables()
    s = get_session()
    try:
        yield s
    finally:
        s.close()
        drop_tables()
        reset_engine()
