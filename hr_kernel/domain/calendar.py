"""
BusinessCalendar -- the single home of date and time arithmetic.

Responsibility:
    Pay-period bounds, day iteration, day counting, "today" and
    time-of-day combination, all in one fixed civil timezone for the whole
    workforce (not UTC, not server-local).

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Engines and services route every
    date computation through an instance of this class so that the five
    call sites agree on what "today" and "this month" mean.

Invariants enforced:
    - Instants returned are timezone-aware in the business timezone.
    - Naive instants handed in are interpreted as UTC.
    - Invalid periods produce zero-length months rather than errors where a
      count is requested (``days_in_month``), and InvalidPayPeriodError where
      bounds are requested.

Failure modes:
    - InvalidPayPeriodError from ``period_bounds``.
    - InvalidTimeOfDayError from ``combine`` / ``parse_time_of_day``.
"""

from __future__ import annotations

import calendar as _stdcal
import re
from collections.abc import Iterator
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from hr_kernel.domain.clock import Clock
from hr_kernel.domain.policy import PayrollPolicy
from hr_kernel.domain.values import PayPeriod
from hr_kernel.exceptions import InvalidPayPeriodError, InvalidTimeOfDayError

_TIME_OF_DAY = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")

_ONE_DAY = timedelta(days=1)
_ONE_MILLI = timedelta(milliseconds=1)


class BusinessCalendar:
    """Timezone-aware date arithmetic for one operating site."""

    def __init__(self, tz_name: str = "Asia/Bangkok"):
        self._tz_name = tz_name
        self._tz = ZoneInfo(tz_name)

    @classmethod
    def from_policy(cls, policy: PayrollPolicy) -> BusinessCalendar:
        return cls(policy.timezone)

    @property
    def tz(self) -> ZoneInfo:
        return self._tz

    @property
    def tz_name(self) -> str:
        return self._tz_name

    # ------------------------------------------------------------------
    # Periods
    # ------------------------------------------------------------------

    def period_bounds(self, year: int, month: int) -> tuple[date, date]:
        """Inclusive (first day, last day) of the pay period."""
        period = PayPeriod(year, month)
        last = _stdcal.monthrange(period.year, period.month)[1]
        return date(period.year, period.month, 1), date(period.year, period.month, last)

    def bounds_of(self, period: PayPeriod) -> tuple[date, date]:
        return self.period_bounds(period.year, period.month)

    def days_in_month(self, year: int, month: int) -> int:
        """Number of days in the month, 0 for an invalid period."""
        try:
            start, end = self.period_bounds(year, month)
        except InvalidPayPeriodError:
            return 0
        return (end - start).days + 1

    def is_future_period(self, period: PayPeriod, today: date) -> bool:
        start, _ = self.bounds_of(period)
        return start > today

    def year_start(self, year: int) -> date:
        return date(year, 1, 1)

    # ------------------------------------------------------------------
    # Days
    # ------------------------------------------------------------------

    def iter_days(self, start: date, end: date) -> Iterator[date]:
        """Every day from start through end inclusive (empty if end < start)."""
        day = start
        while day <= end:
            yield day
            day += _ONE_DAY

    def days_between(self, start: date, end: date) -> int:
        """Calendar-day difference ``end - start`` (negative if reversed)."""
        return (end - start).days

    def days_inclusive(self, start: date, end: date) -> int:
        """Count of days from start through end, 0 if end < start."""
        return max(0, (end - start).days + 1)

    def clamp_to_today(self, day: date, today: date) -> date:
        return min(day, today)

    def next_day(self, day: date) -> date:
        return day + _ONE_DAY

    def previous_day(self, day: date) -> date:
        return day - _ONE_DAY

    # ------------------------------------------------------------------
    # Instants
    # ------------------------------------------------------------------

    @staticmethod
    def parse_time_of_day(value: str) -> time:
        """Parse ``HH:MM`` or ``HH:MM:SS``."""
        if not isinstance(value, str):
            raise InvalidTimeOfDayError(value)
        match = _TIME_OF_DAY.match(value.strip())
        if match is None:
            raise InvalidTimeOfDayError(value)
        hour, minute = int(match.group(1)), int(match.group(2))
        second = int(match.group(3) or 0)
        if hour > 23 or minute > 59 or second > 59:
            raise InvalidTimeOfDayError(value)
        return time(hour, minute, second)

    def combine(self, day: date, time_of_day: str) -> datetime:
        """The instant at ``time_of_day`` on ``day`` in the business timezone."""
        return datetime.combine(day, self.parse_time_of_day(time_of_day), tzinfo=self._tz)

    def localize(self, instant: datetime) -> datetime:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return instant.astimezone(self._tz)

    def local_date(self, instant: datetime) -> date:
        return self.localize(instant).date()

    def today(self, clock: Clock) -> date:
        return self.local_date(clock.now())

    def duration_millis(self, start: datetime, end: datetime) -> int:
        return (self.localize(end) - self.localize(start)) // _ONE_MILLI

    # ------------------------------------------------------------------
    # Tenure
    # ------------------------------------------------------------------

    def full_years_between(self, start: date, end: date) -> int:
        """Completed years from start to end (0 if end precedes start)."""
        years = end.year - start.year
        if (end.month, end.day) < (start.month, start.day):
            years -= 1
        return max(0, years)
