"""
Module: hr_engines.pay_estimate
Responsibility:
    Mid-month projection of one staff member's net pay: base pay for the
    days elapsed (salaried) or hours worked (hourly), overtime so far, the
    projected attendance bonus on month-to-date data, and the same deduction
    stack as the payroll run for the partial month.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Uses the payroll primitives (daily rate, hourly equivalent, statutory
      contribution, loan repayments) so the estimate cannot drift from the
      finalized payslip.
    - Missing optional data degrades to defaults: no bonus rules ->
      ``projected_bonus`` None; no prior payslip -> ``previous_net_pay``
      None; inputs that failed to load are listed in ``missing_inputs``.

Failure modes:
    - NoJobHistoryError when no job is effective today.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from hr_engines.bonus_streak import BonusDecision, assess_sick_leave, evaluate_attendance_bonus
from hr_engines.monthly_aggregator import (
    MonthlyStats,
    active_window,
    aggregate,
    expand_leave_days,
    sick_days_before_month,
    sick_leave_days_in_month,
)
from hr_engines.payroll_calculator import (
    ZERO,
    adjustments_of_kind,
    daily_rate,
    hourly_equivalent,
    loan_repayments,
    overtime_pay,
    period_advances,
    standard_hours_for,
    statutory_contribution,
)
from hr_engines.tracer import traced_engine
from hr_kernel.domain.calendar import BusinessCalendar
from hr_kernel.domain.policy import DEFAULT_POLICY, PayrollPolicy
from hr_kernel.domain.records import (
    AdjustmentKind,
    CompanyConfig,
    PayType,
    StaffPeriodRecords,
)
from hr_kernel.domain.values import PayPeriod, round_money
from hr_kernel.exceptions import NoJobHistoryError


@dataclass(frozen=True)
class PayEstimate:
    staff_id: str
    period: PayPeriod
    as_of: date
    pay_type: PayType
    days_elapsed: int
    worked_hours: Decimal
    base_pay: Decimal
    overtime_pay: Decimal
    projected_bonus: Decimal | None
    projected_streak: int | None
    sso_allowance: Decimal
    other_earnings: Decimal
    absence_deduction: Decimal
    sso: Decimal
    advances: Decimal
    loans: Decimal
    other_deductions: Decimal
    previous_net_pay: Decimal | None
    stats: MonthlyStats
    bonus: BonusDecision | None = None
    missing_inputs: tuple[str, ...] = ()

    @property
    def total_earnings(self) -> Decimal:
        return (
            self.base_pay
            + self.overtime_pay
            + (self.projected_bonus or ZERO)
            + self.sso_allowance
            + self.other_earnings
        )

    @property
    def total_deductions(self) -> Decimal:
        return (
            self.absence_deduction
            + self.sso
            + self.advances
            + self.loans
            + self.other_deductions
        )

    @property
    def estimated_net_pay(self) -> Decimal:
        return self.total_earnings - self.total_deductions


@traced_engine(
    "pay_estimate",
    "1.0",
    fingerprint_fields=("records", "config", "today"),
)
def project_live_pay(
    records: StaffPeriodRecords,
    config: CompanyConfig,
    calendar: BusinessCalendar,
    today: date,
    policy: PayrollPolicy = DEFAULT_POLICY,
) -> PayEstimate:
    staff, period = records.staff, records.period
    job = staff.current_job_as_of(today)
    if job is None:
        raise NoJobHistoryError(staff.id, today.isoformat())

    period_start, _ = calendar.bounds_of(period)
    window = active_window(staff, period, calendar) or (period_start, calendar.previous_day(period_start))
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
    days_elapsed = calendar.days_inclusive(stats.window_start, stats.window_end)

    decision: BonusDecision | None = None
    bonus: Decimal | None = ZERO
    streak: int | None = staff.bonus_streak
    absence = ZERO
    overtime = ZERO

    if job.is_salaried:
        salary = job.rate
        rate = daily_rate(salary, period.year, period.month, calendar)
        base = rate * days_elapsed
        overtime = overtime_pay(
            stats.approved_overtime_minutes,
            hourly_equivalent(salary, standard_hours_for(job, policy), policy),
            config.overtime_rate_multiplier,
        )
        sick_days = sick_leave_days_in_month(records.leave_requests, period, calendar, through=today)
        sick_before = sick_days_before_month(records.leave_requests, period, calendar)
        if config.attendance_bonus is None:
            sick = assess_sick_leave(sick_days, sick_before, config.sick_day_quota, policy)
            days_to_deduct = stats.unexcused_absence_count + sick.deducted_days
            bonus, streak = None, None
        else:
            decision = evaluate_attendance_bonus(
                stats=stats,
                rules=config.attendance_bonus,
                sick_leave_days=sick_days,
                sick_days_before=sick_before,
                sick_day_quota=config.sick_day_quota,
                is_eligible=staff.is_attendance_bonus_eligible,
                current_streak=staff.bonus_streak,
                policy=policy,
            )
            days_to_deduct = decision.days_to_deduct
            if staff.is_separating_in(period):
                bonus, streak = ZERO, staff.bonus_streak
            else:
                bonus, streak = decision.bonus_amount, decision.new_streak
        absence = rate * days_to_deduct
    else:
        base = stats.worked_hours * job.rate

    base, overtime = round_money(base), round_money(overtime)
    if bonus is not None:
        bonus = round_money(bonus)
    sso = ZERO
    if staff.is_sso_registered:
        sso = round_money(statutory_contribution(base + overtime + (bonus or ZERO), config))

    advances = period_advances(records.advances, period)
    repayments = loan_repayments(records.loans)
    earning_adjustments = adjustments_of_kind(records.adjustments, AdjustmentKind.EARNING, period)
    deduction_adjustments = adjustments_of_kind(records.adjustments, AdjustmentKind.DEDUCTION, period)
    previous = records.latest_payslip

    return PayEstimate(
        staff_id=staff.id,
        period=period,
        as_of=today,
        pay_type=job.pay_type,
        days_elapsed=days_elapsed,
        worked_hours=round_money(stats.worked_hours),
        base_pay=base,
        overtime_pay=overtime,
        projected_bonus=bonus,
        projected_streak=streak,
        sso_allowance=sso,
        other_earnings=round_money(sum((a.amount for a in earning_adjustments), ZERO)),
        absence_deduction=round_money(absence),
        sso=sso,
        advances=round_money(sum((a.amount for a in advances), ZERO)),
        loans=round_money(sum((r.amount for r in repayments), ZERO)),
        other_deductions=round_money(sum((a.amount for a in deduction_adjustments), ZERO)),
        previous_net_pay=previous.net_pay if previous is not None else None,
        stats=stats,
        bonus=decision,
        missing_inputs=records.missing_inputs,
    )
