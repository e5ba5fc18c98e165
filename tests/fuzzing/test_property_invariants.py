"""
Property-based tests for the calculation primitives.

Properties checked:
- Streak transition and its inverse
- Money rounding to two places, half up
- Per-day worked time is never negative
- Month lengths and invalid periods
- Monthly aggregation is idempotent and never counts more unexcused
  absences than scheduled past work days
- Statutory contribution stays within the floor and cap
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from hr_engines.attendance_status import late_minutes_for
from hr_engines.bonus_streak import apply_month, bonus_amount_for_streak, revert_month
from hr_engines.monthly_aggregator import aggregate, worked_millis_for_day
from hr_engines.payroll_calculator import statutory_contribution
from hr_kernel.domain.calendar import BusinessCalendar
from hr_kernel.domain.records import AttendanceBonusRules, AttendanceRecord, PayType
from hr_kernel.domain.values import PayPeriod, round_money
from tests.factories import BANGKOK, attended, company_config, work_day

CALENDAR = BusinessCalendar("Asia/Bangkok")
OCTOBER_DAYS = [date(2025, 10, d) for d in range(1, 32)]

pytestmark = pytest.mark.slow


class TestStreakProperties:

    @given(streak=st.integers(0, 500), disqualified=st.booleans(), eligible=st.booleans())
    def test_revert_inverts_apply(self, streak, disqualified, eligible):
        assert revert_month(apply_month(streak, disqualified, eligible), streak) == streak

    @given(streak=st.integers(0, 500))
    def test_fallback_inverts_a_clean_month(self, streak):
        assert revert_month(apply_month(streak, False, True), None) == streak

    @given(streak=st.integers(0, 500))
    def test_bonus_never_decreases_with_streak(self, streak):
        rules = AttendanceBonusRules()
        assert bonus_amount_for_streak(streak + 1, rules) >= bonus_amount_for_streak(streak, rules)


class TestMoneyProperties:

    @given(st.decimals(min_value=-10**9, max_value=10**9, allow_nan=False, allow_infinity=False, places=6))
    def test_round_money_two_places(self, amount):
        rounded = round_money(amount)
        assert rounded.as_tuple().exponent == -2
        assert abs(rounded - amount) <= Decimal("0.005")

    @given(st.decimals(min_value=0, max_value=10**7, allow_nan=False, allow_infinity=False, places=2))
    def test_statutory_contribution_bounded(self, wage):
        config = company_config()
        contribution = statutory_contribution(wage, config)
        assert Decimal("82.5") <= contribution <= Decimal("750")


class TestTimeProperties:

    @given(year=st.integers(1, 9999), month=st.integers(-5, 20))
    def test_days_in_month(self, year, month):
        days = CALENDAR.days_in_month(year, month)
        if 1 <= month <= 12:
            assert 28 <= days <= 31
        else:
            assert days == 0

    @given(seconds=st.integers(-86_400, 86_400), grace=st.integers(0, 60))
    def test_late_minutes_never_negative(self, seconds, grace):
        start = datetime(2025, 10, 6, 9, 0, tzinfo=BANGKOK)
        late = late_minutes_for(start + timedelta(seconds=seconds), start, grace)
        assert late >= 0
        if late:
            assert late * 60 >= seconds

    @given(
        check_in=st.integers(0, 23 * 60),
        length=st.integers(-600, 20 * 60),
        break_minutes=st.one_of(st.none(), st.integers(-120, 240)),
        pay_type=st.sampled_from(PayType),
    )
    def test_worked_time_never_negative(self, check_in, length, break_minutes, pay_type):
        day = date(2025, 10, 6)
        start = datetime(2025, 10, 6, tzinfo=BANGKOK) + timedelta(minutes=check_in)
        record = AttendanceRecord(
            staff_id="S1",
            day=day,
            check_in=start,
            check_out=start + timedelta(minutes=length),
            break_start=start if break_minutes is not None else None,
            break_end=start + timedelta(minutes=break_minutes) if break_minutes is not None else None,
        )
        assert worked_millis_for_day(record, None, pay_type, date(2025, 11, 5), CALENDAR) >= 0


class TestAggregationProperties:

    @settings(max_examples=40, deadline=None)
    @given(
        scheduled=st.sets(st.sampled_from(OCTOBER_DAYS), max_size=31),
        attended_days=st.sets(st.sampled_from(OCTOBER_DAYS), max_size=31),
        today=st.sampled_from(OCTOBER_DAYS + [date(2025, 11, 5)]),
    )
    def test_idempotent_and_bounded(self, scheduled, attended_days, today):
        schedules = [work_day("S1", d) for d in sorted(scheduled)]
        records = [attended("S1", d) for d in sorted(attended_days)]

        def run():
            return aggregate(
                "S1", PayPeriod(2025, 10), PayType.SALARIED, schedules, records, {},
                frozenset(), today, CALENDAR,
            )

        first = run()
        assert first == run()
        past_work_days = {d for d in scheduled if d < today}
        assert first.unexcused_absence_count <= len(past_work_days)
        assert first.unexcused_absence_count == len(past_work_days - attended_days)
        assert first.worked_millis >= 0
