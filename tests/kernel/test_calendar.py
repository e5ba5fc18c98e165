"""
Tests for BusinessCalendar.

Covers:
- Period bounds and day counts, including leap years and invalid periods
- "Today" in the business timezone, not UTC
- Time-of-day parsing and combination
- Duration arithmetic across naive and aware instants
- Completed-years tenure
"""

from datetime import UTC, date, datetime

import pytest

from hr_kernel.domain.calendar import BusinessCalendar
from hr_kernel.domain.clock import DeterministicClock
from hr_kernel.domain.values import PayPeriod
from hr_kernel.exceptions import InvalidPayPeriodError, InvalidTimeOfDayError


@pytest.fixture
def cal() -> BusinessCalendar:
    return BusinessCalendar("Asia/Bangkok")


class TestPeriods:
    """Pay-period bounds and counts."""

    def test_bounds_of_october(self, cal):
        assert cal.period_bounds(2025, 10) == (date(2025, 10, 1), date(2025, 10, 31))

    def test_leap_february(self, cal):
        assert cal.days_in_month(2024, 2) == 29
        assert cal.days_in_month(2025, 2) == 28

    def test_invalid_period_counts_zero_days(self, cal):
        assert cal.days_in_month(2025, 13) == 0
        assert cal.days_in_month(2025, 0) == 0

    def test_invalid_period_bounds_raise(self, cal):
        with pytest.raises(InvalidPayPeriodError):
            cal.period_bounds(2025, 13)

    def test_future_period(self, cal):
        today = date(2025, 10, 15)
        assert cal.is_future_period(PayPeriod(2025, 11), today)
        assert not cal.is_future_period(PayPeriod(2025, 10), today)
        assert not cal.is_future_period(PayPeriod(2025, 9), today)


class TestDays:
    """Day iteration and counting."""

    def test_iter_days_inclusive(self, cal):
        days = list(cal.iter_days(date(2025, 10, 30), date(2025, 11, 2)))
        assert days == [date(2025, 10, 30), date(2025, 10, 31), date(2025, 11, 1), date(2025, 11, 2)]

    def test_iter_days_empty_when_reversed(self, cal):
        assert list(cal.iter_days(date(2025, 10, 2), date(2025, 10, 1))) == []

    def test_days_inclusive(self, cal):
        assert cal.days_inclusive(date(2025, 10, 1), date(2025, 10, 31)) == 31
        assert cal.days_inclusive(date(2025, 10, 2), date(2025, 10, 1)) == 0

    def test_days_between_is_signed(self, cal):
        assert cal.days_between(date(2025, 10, 1), date(2025, 10, 31)) == 30
        assert cal.days_between(date(2025, 10, 31), date(2025, 10, 1)) == -30

    def test_clamp_to_today(self, cal):
        assert cal.clamp_to_today(date(2025, 10, 31), date(2025, 10, 15)) == date(2025, 10, 15)


class TestToday:
    """Business-timezone "today"."""

    def test_late_utc_evening_is_next_local_day(self, cal):
        # 18:30 UTC is 01:30 the next day in Bangkok (UTC+7).
        clock = DeterministicClock(datetime(2025, 10, 31, 18, 30, tzinfo=UTC))
        assert cal.today(clock) == date(2025, 11, 1)

    def test_morning_utc_is_same_local_day(self, cal):
        clock = DeterministicClock(datetime(2025, 10, 15, 5, 0, tzinfo=UTC))
        assert cal.today(clock) == date(2025, 10, 15)


class TestTimeOfDay:
    """Parsing and combination of HH:MM values."""

    @pytest.mark.parametrize("value,expected", [
        ("09:00", (9, 0, 0)),
        ("9:05", (9, 5, 0)),
        ("23:59:30", (23, 59, 30)),
    ])
    def test_parse_valid(self, value, expected):
        t = BusinessCalendar.parse_time_of_day(value)
        assert (t.hour, t.minute, t.second) == expected

    @pytest.mark.parametrize("value", ["24:00", "9", "nine", "", "12:60", None])
    def test_parse_invalid(self, value):
        with pytest.raises(InvalidTimeOfDayError):
            BusinessCalendar.parse_time_of_day(value)

    def test_combine_is_local(self, cal):
        instant = cal.combine(date(2025, 10, 1), "09:00")
        assert instant.astimezone(UTC) == datetime(2025, 10, 1, 2, 0, tzinfo=UTC)


class TestDurations:
    """Millisecond durations."""

    def test_naive_instants_are_utc(self, cal):
        start = datetime(2025, 10, 1, 2, 0)
        end = cal.combine(date(2025, 10, 1), "10:00")
        assert cal.duration_millis(start, end) == 60 * 60 * 1000

    def test_negative_duration(self, cal):
        a = cal.combine(date(2025, 10, 1), "10:00")
        b = cal.combine(date(2025, 10, 1), "09:00")
        assert cal.duration_millis(a, b) == -3_600_000


class TestTenure:
    """Completed years between two dates."""

    def test_one_day_short_of_anniversary(self, cal):
        assert cal.full_years_between(date(2024, 10, 16), date(2025, 10, 15)) == 0

    def test_on_anniversary(self, cal):
        assert cal.full_years_between(date(2024, 10, 15), date(2025, 10, 15)) == 1

    def test_reversed_is_zero(self, cal):
        assert cal.full_years_between(date(2025, 10, 15), date(2024, 1, 1)) == 0
