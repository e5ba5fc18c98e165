"""
Module: hr_engines.monthly_aggregator
Responsibility:
    Walk one staff member's pay period day by day through the status
    resolver and accumulate worked time, scheduled time, lateness, unexcused
    absences, early departures, worked days and approved overtime.  Also
    the leave helpers every call site shares: per-day leave expansion and
    the year-to-date sick-day history that seeds the rolling quota.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  "Today" is a parameter.

Invariants enforced:
    - The walk covers max(period start, active_from) through
      min(today, period end, active_until) inclusive.
    - An absence counts as unexcused only strictly before today and only
      when the day is not a public holiday.
    - Salaried staff lose the default break on days without explicit break
      timestamps; hourly staff only lose explicit breaks.  A schedule
      entry's ``includes_break`` overrides the pay-type rule.
    - A past day with a check-in and no checkout is closed at the policy
      default checkout time; today's open shift contributes nothing.
    - Per-day durations never go below zero.
    - Idempotent: identical inputs yield equal MonthlyStats.

Failure modes:
    - InvalidPayPeriodError for an invalid period.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal

from hr_engines.attendance_status import (
    DayResolution,
    DayStatus,
    resolve_day,
    scheduled_instant,
)
from hr_engines.tracer import traced_engine
from hr_kernel.domain.calendar import BusinessCalendar
from hr_kernel.domain.policy import DEFAULT_POLICY, PayrollPolicy
from hr_kernel.domain.records import (
    AttendanceRecord,
    LeaveRequest,
    LeaveType,
    PayType,
    ScheduleEntry,
    StaffProfile,
)
from hr_kernel.domain.values import PayPeriod

_MILLIS_PER_HOUR = Decimal(3_600_000)


@dataclass(frozen=True)
class MonthlyStats:
    """Aggregated attendance for one staff member and period."""
    staff_id: str
    period: PayPeriod
    pay_type: PayType
    window_start: date
    window_end: date
    worked_millis: int = 0
    scheduled_millis: int = 0
    late_count: int = 0
    late_minutes_sum: int = 0
    unexcused_absence_count: int = 0
    unexcused_absence_days: tuple[date, ...] = ()
    early_departure_minutes: int = 0
    worked_days_count: int = 0
    approved_overtime_minutes: int = 0
    days: tuple[DayResolution, ...] = ()

    @property
    def worked_hours(self) -> Decimal:
        return Decimal(self.worked_millis) / _MILLIS_PER_HOUR

    @property
    def scheduled_hours(self) -> Decimal:
        return Decimal(self.scheduled_millis) / _MILLIS_PER_HOUR


# ---------------------------------------------------------------------------
# Active window and leave helpers
# ---------------------------------------------------------------------------


def active_window(
    staff: StaffProfile,
    period: PayPeriod,
    calendar: BusinessCalendar,
) -> tuple[date, date] | None:
    """Days of the period during which the staff member was employed."""
    start, end = calendar.bounds_of(period)
    if staff.start_date is not None and staff.start_date > start:
        start = staff.start_date
    if staff.end_date is not None and staff.end_date < end:
        end = staff.end_date
    if end < start:
        return None
    return start, end


def expand_leave_days(
    requests: Iterable[LeaveRequest],
    start: date,
    end: date,
    calendar: BusinessCalendar,
) -> dict[date, LeaveRequest]:
    """Per-day lookup of approved leave within [start, end].

    When requests overlap, the earliest-starting request owns the day.
    """
    by_day: dict[date, LeaveRequest] = {}
    ordered = sorted(
        (r for r in requests if r.is_approved),
        key=lambda r: (r.start_date, r.id),
    )
    for request in ordered:
        first = max(request.start_date, start)
        last = min(request.end_date, end)
        for day in calendar.iter_days(first, last):
            by_day.setdefault(day, request)
    return by_day


def leave_days_of_type(
    requests: Iterable[LeaveRequest],
    leave_type: LeaveType,
    start: date,
    end: date,
    calendar: BusinessCalendar,
) -> list[tuple[date, LeaveRequest]]:
    """Chronological (day, request) pairs of one leave type within [start, end]."""
    matching = [r for r in requests if r.leave_type is leave_type]
    expanded = expand_leave_days(matching, start, end, calendar)
    return sorted(expanded.items(), key=lambda item: item[0])


def sick_days_before_month(
    requests: Iterable[LeaveRequest],
    period: PayPeriod,
    calendar: BusinessCalendar,
) -> int:
    """Approved sick days from January 1 up to the day before the period."""
    month_start, _ = calendar.bounds_of(period)
    year_start = calendar.year_start(period.year)
    if month_start == year_start:
        return 0
    return len(
        leave_days_of_type(
            requests, LeaveType.SICK, year_start, calendar.previous_day(month_start), calendar
        )
    )


def sick_leave_days_in_month(
    requests: Iterable[LeaveRequest],
    period: PayPeriod,
    calendar: BusinessCalendar,
    through: date | None = None,
) -> list[tuple[date, LeaveRequest]]:
    """Approved sick days inside the period, optionally cut at ``through``."""
    start, end = calendar.bounds_of(period)
    if through is not None:
        end = min(end, through)
    return leave_days_of_type(requests, LeaveType.SICK, start, end, calendar)


# ---------------------------------------------------------------------------
# Duration primitives
# ---------------------------------------------------------------------------


def subtracts_default_break(pay_type: PayType, schedule: ScheduleEntry | None) -> bool:
    if schedule is not None and schedule.includes_break is not None:
        return schedule.includes_break
    return pay_type is PayType.SALARIED


def worked_millis_for_day(
    attendance: AttendanceRecord,
    schedule: ScheduleEntry | None,
    pay_type: PayType,
    today: date,
    calendar: BusinessCalendar,
    policy: PayrollPolicy = DEFAULT_POLICY,
) -> int:
    if attendance.check_in is None:
        return 0
    check_out = attendance.check_out
    if check_out is None:
        if attendance.day >= today:
            return 0
        check_out = calendar.combine(attendance.day, policy.default_checkout_time)

    total = calendar.duration_millis(attendance.check_in, check_out)
    if attendance.has_explicit_break:
        total -= max(0, calendar.duration_millis(attendance.break_start, attendance.break_end))
    elif subtracts_default_break(pay_type, schedule):
        total -= policy.default_break_minutes * 60_000
    return max(0, total)


def scheduled_span(
    schedule: ScheduleEntry,
    calendar: BusinessCalendar,
) -> tuple[datetime, datetime] | None:
    """(start, end) instants of a work entry; end rolls over midnight."""
    start = scheduled_instant(calendar, schedule.day, schedule.start_time)
    end = scheduled_instant(calendar, schedule.day, schedule.end_time)
    if start is None or end is None:
        return None
    if end <= start:
        end = scheduled_instant(calendar, calendar.next_day(schedule.day), schedule.end_time)
    return start, end


def scheduled_millis_for_day(
    schedule: ScheduleEntry,
    pay_type: PayType,
    calendar: BusinessCalendar,
    policy: PayrollPolicy = DEFAULT_POLICY,
) -> int:
    span = scheduled_span(schedule, calendar)
    if span is None:
        return 0
    total = calendar.duration_millis(*span)
    if subtracts_default_break(pay_type, schedule):
        total -= policy.default_break_minutes * 60_000
    return max(0, total)


def early_departure_minutes_for_day(
    attendance: AttendanceRecord,
    schedule: ScheduleEntry,
    calendar: BusinessCalendar,
) -> int:
    if attendance.check_out is None:
        return 0
    span = scheduled_span(schedule, calendar)
    if span is None:
        return 0
    early = span[1] - calendar.localize(attendance.check_out)
    if early <= timedelta(0):
        return 0
    return math.ceil(early.total_seconds() / 60)


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


@traced_engine(
    "monthly_aggregator",
    "1.0",
    fingerprint_fields=("staff_id", "period", "pay_type", "today"),
)
def aggregate(
    staff_id: str,
    period: PayPeriod,
    pay_type: PayType,
    schedules: Sequence[ScheduleEntry],
    attendance: Sequence[AttendanceRecord],
    leave_days: dict[date, LeaveRequest],
    public_holidays: frozenset[date],
    today: date,
    calendar: BusinessCalendar,
    policy: PayrollPolicy = DEFAULT_POLICY,
    active_from: date | None = None,
    active_until: date | None = None,
) -> MonthlyStats:
    period_start, period_end = calendar.bounds_of(period)
    window_start = max(period_start, active_from) if active_from else period_start
    window_end = calendar.clamp_to_today(period_end, today)
    if active_until is not None:
        window_end = min(window_end, active_until)

    schedule_by_day = {s.day: s for s in schedules if s.staff_id == staff_id}
    attendance_by_day = {a.day: a for a in attendance if a.staff_id == staff_id}

    worked = scheduled = 0
    late_count = late_sum = 0
    absences: list[date] = []
    early_minutes = worked_days = overtime_minutes = 0
    days: list[DayResolution] = []

    for day in calendar.iter_days(window_start, window_end):
        schedule = schedule_by_day.get(day)
        record = attendance_by_day.get(day)
        leave = leave_days.get(day)

        resolution = resolve_day(schedule, record, leave, day, today, calendar, policy)
        days.append(resolution)

        if resolution.status is DayStatus.LATE:
            late_count += 1
            late_sum += resolution.late_minutes
        elif (
            resolution.status is DayStatus.ABSENT
            and day < today
            and day not in public_holidays
        ):
            absences.append(day)

        if record is not None and record.check_in is not None:
            worked_days += 1
            worked += worked_millis_for_day(record, schedule, pay_type, today, calendar, policy)
            overtime_minutes += record.approved_overtime_minutes
            if schedule is not None and schedule.is_work:
                early_minutes += early_departure_minutes_for_day(record, schedule, calendar)

        if schedule is not None and schedule.is_work and leave is None:
            scheduled += scheduled_millis_for_day(schedule, pay_type, calendar, policy)

    return MonthlyStats(
        staff_id=staff_id,
        period=period,
        pay_type=pay_type,
        window_start=window_start,
        window_end=window_end,
        worked_millis=worked,
        scheduled_millis=scheduled,
        late_count=late_count,
        late_minutes_sum=late_sum,
        unexcused_absence_count=len(absences),
        unexcused_absence_days=tuple(absences),
        early_departure_minutes=early_minutes,
        worked_days_count=worked_days,
        approved_overtime_minutes=overtime_minutes,
        days=tuple(days),
    )
