"""
Clock -- the only source of "now".

Responsibility:
    Services receive a Clock and never call ``datetime.now()`` or
    ``date.today()`` themselves.  "Today" for every call site is derived from
    the clock through ``BusinessCalendar.today``, once per operation.

Architecture position:
    Kernel > Domain -- zero I/O except SystemClock.

Failure modes:
    (none)
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """Injected time source.  ``now()`` is always timezone-aware."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    Test clock pinned to one instant.

    ``now()`` returns the same value until ``advance()`` moves it, so a
    service can be driven across a business-day boundary between calls.
    """

    def __init__(self, fixed_time: datetime):
        if fixed_time.tzinfo is None:
            fixed_time = fixed_time.replace(tzinfo=timezone.utc)
        self._now = fixed_time

    def now(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta) -> datetime:
        self._now = self._now + delta
        return self._now
