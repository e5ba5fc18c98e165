"""
Tests for the attendance service.

Covers the dashboard summary, the side-effect-free bonus calculator and
missing-checkout detection and repair.
"""

from datetime import date
from decimal import Decimal

import pytest

from hr_kernel.domain.records import AttendanceRecord
from hr_kernel.exceptions import (
    AttendanceRecordNotFoundError,
    FailedPreconditionError,
    InvalidArgumentError,
    NonMonthlyStaffError,
    StaffNotFoundError,
)
from tests.conftest import TEST_ACTOR_ID
from tests.factories import at, attended, company_config, make_staff, seed
from tests.modules.conftest import HOURLY_ID, NOT_STARTED_ID, SALARIED_ID

OPEN_DAY = date(2025, 10, 6)


@pytest.fixture
def open_shifts(session):
    """Two open shifts before today and one today."""
    seed(
        session,
        config=company_config(),
        staff=[make_staff("S1"), make_staff("S2")],
        attendance=[
            attended("S1", OPEN_DAY, check_out=None),
            attended("S2", date(2025, 10, 7), "16:00", check_out=None),
            attended("S1", date(2025, 11, 5), check_out=None),
            attended("S2", date(2025, 10, 8)),
        ],
    )
    return session


class TestMonthlySummary:

    def test_full_month(self, october_roster, attendance_service):
        stats = attendance_service.monthly_summary(SALARIED_ID, 2025, 10)
        assert stats.worked_days_count == 23
        assert stats.worked_hours == Decimal(184)
        assert stats.unexcused_absence_count == 0
        assert stats.late_count == 0

    def test_not_yet_employed_is_empty(self, october_roster, attendance_service):
        stats = attendance_service.monthly_summary(NOT_STARTED_ID, 2025, 10)
        assert stats.worked_days_count == 0
        assert stats.days == ()

    def test_unknown_staff(self, october_roster, attendance_service):
        with pytest.raises(StaffNotFoundError):
            attendance_service.monthly_summary("S9", 2025, 10)


class TestBonusCalculator:

    def test_does_not_touch_streak(self, october_roster, attendance_service):
        decision = attendance_service.calculate_bonus(SALARIED_ID, 2025, 10)
        assert decision.new_streak == 1
        assert decision.bonus_amount == Decimal("400")
        again = attendance_service.calculate_bonus(SALARIED_ID, 2025, 10)
        assert again.previous_streak == 0

    def test_hourly_staff_rejected(self, october_roster, attendance_service):
        with pytest.raises(NonMonthlyStaffError):
            attendance_service.calculate_bonus(HOURLY_ID, 2025, 10)


class TestMissingCheckouts:

    def test_only_days_before_today(self, open_shifts, attendance_service, captured_logs):
        missing = attendance_service.find_missing_checkouts()
        assert [(r.staff_id, r.day) for r in missing] == [("S1", OPEN_DAY), ("S2", date(2025, 10, 7))]
        assert any(r["message"] == "missing_checkouts_found" and r["count"] == 2 for r in captured_logs())

    def test_explicit_today(self, open_shifts, attendance_service):
        assert attendance_service.find_missing_checkouts(today=OPEN_DAY) == []


class TestAutoFixCheckout:

    def test_closes_after_shift_length(self, open_shifts, attendance_service):
        fixed = attendance_service.auto_fix_checkout("S1", OPEN_DAY, TEST_ACTOR_ID)
        assert isinstance(fixed, AttendanceRecord)
        assert fixed.check_out == at(OPEN_DAY, "18:00")
        assert fixed.check_out_note == "Auto-fixed: checkout set to 18:00 (Asia/Bangkok)"
        assert len(attendance_service.find_missing_checkouts()) == 1

    def test_capped_at_default_checkout_time(self, open_shifts, attendance_service):
        day = date(2025, 10, 7)
        fixed = attendance_service.auto_fix_checkout("S2", day, TEST_ACTOR_ID)
        assert fixed.check_out == at(day, "23:00")

    def test_already_closed_is_unchanged(self, open_shifts, attendance_service):
        day = date(2025, 10, 8)
        record = attendance_service.auto_fix_checkout("S2", day, TEST_ACTOR_ID)
        assert record.check_out == at(day, "18:00")
        assert record.check_out_note is None

    def test_missing_record(self, open_shifts, attendance_service):
        with pytest.raises(AttendanceRecordNotFoundError):
            attendance_service.auto_fix_checkout("S1", date(2025, 10, 9), TEST_ACTOR_ID)

    def test_record_without_check_in(self, open_shifts, attendance_service):
        seed(open_shifts, attendance=[AttendanceRecord(staff_id="S1", day=date(2025, 10, 10))])
        with pytest.raises(FailedPreconditionError):
            attendance_service.auto_fix_checkout("S1", date(2025, 10, 10), TEST_ACTOR_ID)

    def test_actor_required(self, open_shifts, attendance_service):
        with pytest.raises(InvalidArgumentError):
            attendance_service.auto_fix_checkout("S1", OPEN_DAY, "")
