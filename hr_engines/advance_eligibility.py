"""
Module: hr_engines.advance_eligibility
Responsibility:
    Month-to-date cap on how much salary a salaried staff member may draw
    early: salary due after unpaid absences so far, times the company
    eligibility percentage, minus advances already requested this period.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Only unexcused absences strictly before today count.
    - ``current_salary_due`` and ``available_advance`` never go below zero.
    - ``max_theoretical_advance`` is floored to a whole currency unit.
    - Pending and approved advances both count as already taken.

Failure modes:
    - NoJobHistoryError when no job is effective today.
    - HourlyStaffNotEligibleError for hourly staff.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_FLOOR, Decimal

from hr_engines.monthly_aggregator import active_window, aggregate, expand_leave_days
from hr_engines.payroll_calculator import HUNDRED, ZERO, daily_rate, period_advances
from hr_engines.tracer import traced_engine
from hr_kernel.domain.calendar import BusinessCalendar
from hr_kernel.domain.policy import DEFAULT_POLICY, PayrollPolicy
from hr_kernel.domain.records import AdvanceStatus, CompanyConfig, StaffPeriodRecords
from hr_kernel.domain.values import PayPeriod, round_money
from hr_kernel.exceptions import HourlyStaffNotEligibleError, NoJobHistoryError


@dataclass(frozen=True)
class AdvanceEligibility:
    staff_id: str
    period: PayPeriod
    as_of: date
    monthly_salary: Decimal
    daily_rate: Decimal
    unpaid_absences: int
    current_salary_due: Decimal
    eligibility_percentage: Decimal
    max_theoretical_advance: Decimal
    advances_taken: Decimal
    available_advance: Decimal


@traced_engine(
    "advance_eligibility",
    "1.0",
    fingerprint_fields=("records", "config", "today"),
)
def calculate_advance_eligibility(
    records: StaffPeriodRecords,
    config: CompanyConfig,
    calendar: BusinessCalendar,
    today: date,
    policy: PayrollPolicy = DEFAULT_POLICY,
) -> AdvanceEligibility:
    staff, period = records.staff, records.period
    job = staff.current_job_as_of(today)
    if job is None:
        raise NoJobHistoryError(staff.id, today.isoformat())
    if not job.is_salaried:
        raise HourlyStaffNotEligibleError(staff.id)

    absences = 0
    window = active_window(staff, period, calendar)
    if window is not None:
        stats = aggregate(
            staff.id,
            period,
            job.pay_type,
            records.schedules,
            records.attendance,
            expand_leave_days(records.leave_requests, window[0], window[1], calendar),
            config.public_holidays,
            today,
            calendar,
            policy,
            active_from=window[0],
            active_until=window[1],
        )
        absences = stats.unexcused_absence_count

    salary = job.rate
    rate = daily_rate(salary, period.year, period.month, calendar)
    due = max(ZERO, salary - rate * absences)
    theoretical = (due * config.advance_eligibility_percentage / HUNDRED).to_integral_value(
        rounding=ROUND_FLOOR
    )
    taken = sum(
        (a.amount for a in period_advances(
            records.advances, period, (AdvanceStatus.PENDING, AdvanceStatus.APPROVED)
        )),
        ZERO,
    )

    return AdvanceEligibility(
        staff_id=staff.id,
        period=period,
        as_of=today,
        monthly_salary=salary,
        daily_rate=round_money(rate),
        unpaid_absences=absences,
        current_salary_due=round_money(due),
        eligibility_percentage=config.advance_eligibility_percentage,
        max_theoretical_advance=theoretical,
        advances_taken=round_money(taken),
        available_advance=round_money(max(ZERO, theoretical - taken)),
    )
