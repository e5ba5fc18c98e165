"""
Tests for month-to-date advance eligibility.

``today`` is 2025-10-15; the salary is 31,000 so one day is 1,000.
"""

from datetime import date
from decimal import Decimal

import pytest

from hr_engines.advance_eligibility import calculate_advance_eligibility
from hr_kernel.domain.records import AdvanceStatus, StaffPeriodRecords
from hr_kernel.domain.values import PayPeriod
from hr_kernel.exceptions import HourlyStaffNotEligibleError, NoJobHistoryError
from tests.factories import (
    advance,
    company_config,
    full_attendance,
    hourly_job,
    make_staff,
    salaried_job,
)

OCT = PayPeriod(2025, 10)
TODAY = date(2025, 10, 15)


def _records(staff, skip_days=(), advances=()):
    schedules, attendance = full_attendance(staff.id, date(2025, 10, 1), date(2025, 10, 31))
    attendance = [a for a in attendance if a.day <= TODAY and a.day not in skip_days]
    return StaffPeriodRecords(
        staff=staff,
        period=OCT,
        schedules=tuple(schedules),
        attendance=tuple(attendance),
        advances=tuple(advances),
    )


def _calculate(records, calendar):
    return calculate_advance_eligibility(records, company_config(), calendar, TODAY)


class TestAdvanceEligibility:

    def test_absences_and_prior_advances_reduce_availability(self, calendar):
        staff = make_staff(job=salaried_job("31000"))
        records = _records(
            staff,
            skip_days=(date(2025, 10, 2),),
            advances=[
                advance("S1", 2025, 10, "1000"),
                advance("S1", 2025, 10, "2000", status=AdvanceStatus.PENDING),
                advance("S1", 2025, 10, "500", status=AdvanceStatus.REJECTED),
            ],
        )
        result = _calculate(records, calendar)
        assert result.unpaid_absences == 1
        assert result.daily_rate == Decimal("1000.00")
        assert result.current_salary_due == Decimal("30000.00")
        assert result.max_theoretical_advance == Decimal("15000")
        assert result.advances_taken == Decimal("3000.00")
        assert result.available_advance == Decimal("12000.00")

    def test_absence_today_not_counted(self, calendar):
        staff = make_staff(job=salaried_job("31000"))
        result = _calculate(_records(staff, skip_days=(TODAY,)), calendar)
        assert result.unpaid_absences == 0

    def test_theoretical_advance_floored(self, calendar):
        staff = make_staff(job=salaried_job("30001"))
        result = _calculate(_records(staff), calendar)
        assert result.max_theoretical_advance == Decimal("15000")

    def test_available_never_negative(self, calendar):
        staff = make_staff(job=salaried_job("31000"))
        result = _calculate(_records(staff, advances=[advance("S1", 2025, 10, "20000")]), calendar)
        assert result.available_advance == Decimal("0")

    def test_hourly_staff_rejected(self, calendar):
        with pytest.raises(HourlyStaffNotEligibleError):
            _calculate(_records(make_staff(job=hourly_job())), calendar)

    def test_no_job_today(self, calendar):
        staff = make_staff(job=salaried_job("31000", effective_from=date(2025, 10, 20)))
        with pytest.raises(NoJobHistoryError):
            _calculate(_records(staff), calendar)
