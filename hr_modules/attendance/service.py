"""
Attendance Service (``hr_modules.attendance.service``).

Responsibility
--------------
Attendance-facing views and maintenance on top of the engines: the monthly
dashboard summary, a side-effect-free bonus calculation, detection of
shifts that were never checked out, and auto-closing such a shift.

Architecture position
---------------------
**Modules layer** -- reads through ``StaffRecordLoader``; the only write is
``auto_fix_checkout``, which owns its transaction boundary.

Invariants enforced
-------------------
* ``calculate_bonus`` never mutates the streak.
* ``auto_fix_checkout`` closes a shift at the earlier of check-in plus the
  policy shift length and the policy default checkout time on that day.
  A record that already has a checkout is returned unchanged.

Failure modes
-------------
* StaffNotFoundError, CompanyConfigNotFoundError, NoJobHistoryError.
* NonMonthlyStaffError from ``calculate_bonus`` for hourly staff.
* BonusRulesNotFoundError when the company config has no bonus rules.
* AttendanceRecordNotFoundError from ``auto_fix_checkout``.
"""

from __future__ import annotations

from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from hr_engines.bonus_streak import BonusDecision, evaluate_attendance_bonus
from hr_engines.monthly_aggregator import (
    MonthlyStats,
    active_window,
    aggregate,
    expand_leave_days,
    sick_days_before_month,
    sick_leave_days_in_month,
)
from hr_kernel.domain.calendar import BusinessCalendar
from hr_kernel.domain.clock import Clock, SystemClock
from hr_kernel.domain.policy import DEFAULT_POLICY, PayrollPolicy
from hr_kernel.domain.records import (
    AttendanceRecord,
    CompanyConfig,
    JobRecord,
    StaffPeriodRecords,
)
from hr_kernel.domain.values import PayPeriod
from hr_kernel.exceptions import (
    AttendanceRecordNotFoundError,
    CompanyConfigNotFoundError,
    FailedPreconditionError,
    InvalidArgumentError,
    NoJobHistoryError,
    NonMonthlyStaffError,
    StaffNotFoundError,
)
from hr_kernel.logging_config import LogContext, get_logger
from hr_kernel.models import AttendanceModel
from hr_modules._loading import StaffRecordLoader

logger = get_logger("modules.attendance.service")


class AttendanceService:
    """Dashboard summary, bonus calculator and missing-checkout maintenance."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        policy: PayrollPolicy | None = None,
        calendar: BusinessCalendar | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._policy = policy or DEFAULT_POLICY
        self._calendar = calendar or BusinessCalendar.from_policy(self._policy)
        self._loader = StaffRecordLoader(session, self._calendar)
        self._selector = self._loader.selector

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def monthly_summary(self, staff_id: str, year: int, month: int) -> MonthlyStats:
        """Month-to-date aggregate for the dashboard."""
        period = PayPeriod(year, month)
        with LogContext.bind(staff_id=staff_id, pay_period=period.key):
            records, config, job, window = self._prepare(staff_id, period)
            return self._aggregate(records, config, job, window)

    def calculate_bonus(self, staff_id: str, year: int, month: int) -> BonusDecision:
        """The month's bonus outcome, without touching the stored streak."""
        period = PayPeriod(year, month)
        with LogContext.bind(staff_id=staff_id, pay_period=period.key):
            records, config, job, window = self._prepare(staff_id, period)
            if not job.is_salaried:
                raise NonMonthlyStaffError(staff_id)
            today = self._calendar.today(self._clock)
            stats = self._aggregate(records, config, job, window)
            decision = evaluate_attendance_bonus(
                stats=stats,
                rules=config.attendance_bonus,
                sick_leave_days=sick_leave_days_in_month(
                    records.leave_requests, period, self._calendar,
                    through=min(window[1], today),
                ),
                sick_days_before=sick_days_before_month(
                    records.leave_requests, period, self._calendar
                ),
                sick_day_quota=config.sick_day_quota,
                is_eligible=records.staff.is_attendance_bonus_eligible,
                current_streak=records.staff.bonus_streak,
                policy=self._policy,
            )
            logger.info("attendance_bonus_calculated", extra={
                "new_streak": decision.new_streak,
                "bonus_amount": str(decision.bonus_amount),
                "reasons": list(decision.reasons),
            })
            return decision

    def find_missing_checkouts(self, today: date | None = None) -> list[AttendanceRecord]:
        """Shifts with a check-in and no checkout, dated before today."""
        if today is None:
            today = self._calendar.today(self._clock)
        open_shifts = self._selector.open_shifts_before(today)
        logger.info("missing_checkouts_found", extra={
            "count": len(open_shifts),
            "before": today,
        })
        return open_shifts

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def auto_fix_checkout(self, staff_id: str, day: date, actor_id: str) -> AttendanceRecord:
        """Close an open shift at the policy checkout instant."""
        if not actor_id:
            raise InvalidArgumentError("actor_id is required for write operations")

        with LogContext.bind(staff_id=staff_id, actor_id=actor_id):
            model = self._session.scalars(
                select(AttendanceModel).where(
                    AttendanceModel.staff_id == staff_id,
                    AttendanceModel.day == day,
                )
            ).first()
            if model is None:
                raise AttendanceRecordNotFoundError(staff_id, day.isoformat())
            if model.check_out is not None:
                return model.to_dto()
            if model.check_in is None:
                raise FailedPreconditionError(
                    f"Attendance for {staff_id} on {day.isoformat()} has no check-in"
                )

            check_in = self._calendar.localize(model.check_in)
            shift_end = check_in + timedelta(hours=self._policy.auto_fix_shift_hours)
            day_cap = self._calendar.combine(day, self._policy.default_checkout_time)
            check_out = min(shift_end, day_cap)
            if check_out < check_in:
                check_out = check_in

            try:
                model.check_out = check_out
                model.check_out_note = (
                    f"Auto-fixed: checkout set to {check_out.strftime('%H:%M')} "
                    f"({self._calendar.tz_name})"
                )
                model.updated_by_id = actor_id
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info("checkout_auto_fixed", extra={
                "day": day,
                "check_out": check_out,
            })
            return model.to_dto()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _prepare(
        self,
        staff_id: str,
        period: PayPeriod,
    ) -> tuple[StaffPeriodRecords, CompanyConfig, JobRecord, tuple[date, date]]:
        staff = self._selector.get_staff(staff_id)
        if staff is None:
            raise StaffNotFoundError(staff_id)
        config = self._selector.get_company_config()
        if config is None:
            raise CompanyConfigNotFoundError()

        period_start, period_end = self._calendar.bounds_of(period)
        window = active_window(staff, period, self._calendar)
        if window is None:
            window = (period_start, self._calendar.previous_day(period_start))
        job = staff.current_job_as_of(max(window[1], period_start))
        if job is None:
            raise NoJobHistoryError(staff_id, period_end.isoformat())
        return self._loader.load(staff, period), config, job, window

    def _aggregate(
        self,
        records: StaffPeriodRecords,
        config: CompanyConfig,
        job: JobRecord,
        window: tuple[date, date],
    ) -> MonthlyStats:
        return aggregate(
            records.staff.id,
            records.period,
            job.pay_type,
            records.schedules,
            records.attendance,
            expand_leave_days(records.leave_requests, window[0], window[1], self._calendar),
            config.public_holidays,
            self._calendar.today(self._clock),
            self._calendar,
            self._policy,
            active_from=window[0],
            active_until=window[1],
        )
