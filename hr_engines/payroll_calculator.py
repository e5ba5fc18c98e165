"""
Module: hr_engines.payroll_calculator
Responsibility:
    Compute one staff member's payroll line for a pay period: base pay
    (with proration for mid-month hires and separations), leave payout on
    separation, overtime, attendance bonus, statutory contribution and its
    mirrored allowance, manual adjustments, advances and loan repayments.
    Also the run-level period gate and the per-staff eligibility gate.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  The payroll service loads
    ``StaffPeriodRecords`` and calls ``calculate_payroll_line`` per staff
    member, possibly from worker threads.

Invariants enforced:
    - Decimal-only arithmetic; every output money line is quantized to 0.01
      half up, and net pay is derived from the quantized lines.
    - Net pay is never clamped; ``payable_net_pay`` is the presentation
      value floored at zero.
    - Division guards: an invalid month or zero standard hours yields a
      zero rate, never an exception.
    - Separation month: no bonus and the streak is carried unchanged.
    - Hourly staff: no proration, no absence deduction, no bonus, no
      overtime premium.

Failure modes:
    - FuturePeriodError / PreCutoverPeriodError from ``check_run_period``.
    - NoJobHistoryError when no job is effective in the active window.
    - BonusRulesNotFoundError for salaried staff without bonus rules.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_FLOOR, Decimal

from hr_engines.bonus_streak import BonusDecision, evaluate_attendance_bonus
from hr_engines.monthly_aggregator import (
    MonthlyStats,
    active_window,
    aggregate,
    expand_leave_days,
    leave_days_of_type,
    sick_days_before_month,
    sick_leave_days_in_month,
)
from hr_engines.tracer import traced_engine
from hr_kernel.domain.calendar import BusinessCalendar
from hr_kernel.domain.policy import DEFAULT_POLICY, PayrollPolicy
from hr_kernel.domain.records import (
    AdjustmentKind,
    AdvanceStatus,
    CompanyConfig,
    JobRecord,
    LeaveRequest,
    LeaveType,
    Loan,
    LoanRepayment,
    MonthlyAdjustment,
    PayType,
    SalaryAdvance,
    StaffPeriodRecords,
    StaffProfile,
)
from hr_kernel.domain.values import PayPeriod, round_money
from hr_kernel.exceptions import (
    FailedPreconditionError,
    FuturePeriodError,
    NoJobHistoryError,
    PreCutoverPeriodError,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
MINUTES_PER_HOUR = Decimal("60")

NOT_STARTED = "not_started"
SEPARATED_BEFORE_PERIOD = "separated_before_period"
ALREADY_FINALIZED = "already_finalized"


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LeavePayout:
    """Unused entitlement paid out on separation."""
    annual_entitlement: int
    annual_used: int
    holiday_credits: int
    holiday_credits_used: int
    daily_rate: Decimal

    @property
    def annual_days(self) -> int:
        return max(0, self.annual_entitlement - self.annual_used)

    @property
    def holiday_days(self) -> int:
        return max(0, self.holiday_credits - self.holiday_credits_used)

    @property
    def total(self) -> Decimal:
        return round_money((self.annual_days + self.holiday_days) * self.daily_rate)


@dataclass(frozen=True)
class Earnings:
    base_pay: Decimal = ZERO
    overtime_pay: Decimal = ZERO
    attendance_bonus: Decimal = ZERO
    sso_allowance: Decimal = ZERO
    leave_payout: Decimal = ZERO
    other: tuple[MonthlyAdjustment, ...] = ()

    @property
    def other_total(self) -> Decimal:
        return sum((a.amount for a in self.other), ZERO)

    @property
    def total(self) -> Decimal:
        return (
            self.base_pay
            + self.overtime_pay
            + self.attendance_bonus
            + self.sso_allowance
            + self.leave_payout
            + self.other_total
        )


@dataclass(frozen=True)
class Deductions:
    absence: Decimal = ZERO
    unexcused_absence_days: int = 0
    sick_leave_deducted_days: int = 0
    sso: Decimal = ZERO
    advances: Decimal = ZERO
    loans: Decimal = ZERO
    other: tuple[MonthlyAdjustment, ...] = ()
    advance_ids: tuple[str, ...] = ()
    loan_repayments: tuple[LoanRepayment, ...] = ()

    @property
    def other_total(self) -> Decimal:
        return sum((a.amount for a in self.other), ZERO)

    @property
    def total(self) -> Decimal:
        return self.absence + self.sso + self.advances + self.loans + self.other_total


@dataclass(frozen=True)
class PayrollLine:
    """One staff member's computed payroll for a period."""
    staff_id: str
    display_name: str
    period: PayPeriod
    pay_type: PayType
    position: str
    department: str
    earnings: Earnings
    deductions: Deductions
    previous_streak: int
    new_streak: int
    stats: MonthlyStats
    bonus: BonusDecision | None = None
    leave_payout: LeavePayout | None = None
    is_separating: bool = False
    missing_inputs: tuple[str, ...] = ()

    @property
    def net_pay(self) -> Decimal:
        return self.earnings.total - self.deductions.total

    @property
    def payable_net_pay(self) -> Decimal:
        return max(ZERO, self.net_pay)


# ---------------------------------------------------------------------------
# Gates
# ---------------------------------------------------------------------------


def check_run_period(
    period: PayPeriod,
    today: date,
    calendar: BusinessCalendar,
    policy: PayrollPolicy = DEFAULT_POLICY,
) -> None:
    """Reject future periods and periods before the payroll cutover."""
    if calendar.is_future_period(period, today):
        raise FuturePeriodError(period.key)
    period_start, _ = calendar.bounds_of(period)
    if period_start < policy.payroll_cutover:
        raise PreCutoverPeriodError(period.key, policy.payroll_cutover.isoformat())


def ineligibility_reason(
    staff: StaffProfile,
    period: PayPeriod,
    calendar: BusinessCalendar,
    already_finalized: bool = False,
) -> str | None:
    """Why the staff member is not payable for the period, or None."""
    period_start, period_end = calendar.bounds_of(period)
    if staff.start_date is not None and staff.start_date > period_end:
        return NOT_STARTED
    if staff.end_date is not None and staff.end_date < period_start:
        return SEPARATED_BEFORE_PERIOD
    if already_finalized:
        return ALREADY_FINALIZED
    return None


# ---------------------------------------------------------------------------
# Primitives shared with the advance and live estimate engines
# ---------------------------------------------------------------------------


def daily_rate(monthly_salary: Decimal, year: int, month: int, calendar: BusinessCalendar) -> Decimal:
    days = calendar.days_in_month(year, month)
    if days <= 0:
        return ZERO
    return Decimal(monthly_salary) / days


def hourly_equivalent(
    monthly_salary: Decimal,
    standard_day_hours: Decimal,
    policy: PayrollPolicy = DEFAULT_POLICY,
) -> Decimal:
    """``(salary / 30) / standard_day_hours`` with the divisor from policy."""
    if standard_day_hours <= 0 or policy.hourly_equivalent_days <= 0:
        return ZERO
    return Decimal(monthly_salary) / policy.hourly_equivalent_days / Decimal(standard_day_hours)


def standard_hours_for(job: JobRecord, policy: PayrollPolicy = DEFAULT_POLICY) -> Decimal:
    return job.standard_day_hours if job.standard_day_hours else policy.standard_day_hours


def overtime_pay(minutes: int, hourly_rate: Decimal, multiplier: Decimal) -> Decimal:
    return Decimal(minutes) / MINUTES_PER_HOUR * hourly_rate * multiplier


def statutory_contribution(wage_base: Decimal, config: CompanyConfig) -> Decimal:
    """Contribution on the wage base clamped to [floor, cap]."""
    base = min(max(config.sso_wage_floor, wage_base), config.sso_wage_cap)
    return base * config.sso_rate / HUNDRED


def adjustments_of_kind(
    adjustments: Iterable[MonthlyAdjustment],
    kind: AdjustmentKind,
    period: PayPeriod,
) -> tuple[MonthlyAdjustment, ...]:
    return tuple(
        a for a in adjustments
        if a.kind is kind
        and a.pay_period_year == period.year
        and a.pay_period_month == period.month
    )


def period_advances(
    advances: Iterable[SalaryAdvance],
    period: PayPeriod,
    statuses: tuple[AdvanceStatus, ...] = (AdvanceStatus.APPROVED,),
) -> tuple[SalaryAdvance, ...]:
    return tuple(
        a for a in advances
        if a.status in statuses
        and a.pay_period_year == period.year
        and a.pay_period_month == period.month
    )


def loan_repayments(loans: Iterable[Loan]) -> tuple[LoanRepayment, ...]:
    repayments = []
    for loan in loans:
        amount = loan.scheduled_repayment
        if amount > 0:
            repayments.append(LoanRepayment(loan_id=loan.id, amount=amount))
    return tuple(repayments)


def annual_leave_entitlement(
    staff: StaffProfile,
    separation: date,
    config: CompanyConfig,
    calendar: BusinessCalendar,
) -> int:
    """Full entitlement after a year of service, else months worked this year."""
    if staff.start_date is None:
        return 0
    if calendar.full_years_between(staff.start_date, separation) >= 1:
        return config.annual_leave_days
    if staff.start_date.year == separation.year:
        months_worked = separation.month - staff.start_date.month + 1
        prorated = Decimal(config.annual_leave_days) / 12 * months_worked
        return int(prorated.to_integral_value(rounding=ROUND_FLOOR))
    return 0


def leave_payout(
    staff: StaffProfile,
    leave_requests: Iterable[LeaveRequest],
    config: CompanyConfig,
    rate: Decimal,
    calendar: BusinessCalendar,
) -> LeavePayout | None:
    """Annual leave balance plus holiday credits, both up to the separation day."""
    if staff.end_date is None:
        return None
    separation = staff.end_date
    year_start = calendar.year_start(separation.year)
    requests = list(leave_requests)

    annual_used = len(leave_days_of_type(requests, LeaveType.ANNUAL, year_start, separation, calendar))
    in_lieu_used = len(
        leave_days_of_type(requests, LeaveType.PUBLIC_HOLIDAY_IN_LIEU, year_start, separation, calendar)
    )
    past_holidays = sum(1 for h in config.public_holidays if year_start <= h <= separation)

    return LeavePayout(
        annual_entitlement=annual_leave_entitlement(staff, separation, config, calendar),
        annual_used=annual_used,
        holiday_credits=min(past_holidays, config.public_holiday_credit_cap),
        holiday_credits_used=in_lieu_used,
        daily_rate=rate,
    )


# ---------------------------------------------------------------------------
# Line calculation
# ---------------------------------------------------------------------------


@traced_engine(
    "payroll_calculator",
    "1.0",
    fingerprint_fields=("records", "config", "today"),
)
def calculate_payroll_line(
    records: StaffPeriodRecords,
    config: CompanyConfig,
    calendar: BusinessCalendar,
    today: date,
    policy: PayrollPolicy = DEFAULT_POLICY,
) -> PayrollLine:
    staff, period = records.staff, records.period
    window = active_window(staff, period, calendar)
    if window is None:
        raise FailedPreconditionError(
            f"Staff {staff.id} is not employed during {period.key}"
        )
    job = staff.current_job_as_of(window[1])
    if job is None:
        raise NoJobHistoryError(staff.id, window[1].isoformat())

    leave_days = expand_leave_days(records.leave_requests, window[0], window[1], calendar)
    stats = aggregate(
        staff.id,
        period,
        job.pay_type,
        records.schedules,
        records.attendance,
        leave_days,
        config.public_holidays,
        today,
        calendar,
        policy,
        active_from=window[0],
        active_until=window[1],
    )

    if job.is_salaried:
        return _salaried_line(records, job, stats, window, config, calendar, today, policy)
    return _hourly_line(records, job, stats, config)


def _shared_deductions(records: StaffPeriodRecords) -> dict:
    period = records.period
    advances = period_advances(records.advances, period)
    repayments = loan_repayments(records.loans)
    return {
        "advances": round_money(sum((a.amount for a in advances), ZERO)),
        "advance_ids": tuple(a.id for a in advances),
        "loans": round_money(sum((r.amount for r in repayments), ZERO)),
        "loan_repayments": repayments,
        "other": adjustments_of_kind(records.adjustments, AdjustmentKind.DEDUCTION, period),
    }


def _salaried_line(
    records: StaffPeriodRecords,
    job: JobRecord,
    stats: MonthlyStats,
    window: tuple[date, date],
    config: CompanyConfig,
    calendar: BusinessCalendar,
    today: date,
    policy: PayrollPolicy,
) -> PayrollLine:
    staff, period = records.staff, records.period
    salary = job.rate
    rate = daily_rate(salary, period.year, period.month, calendar)

    if window == calendar.bounds_of(period):
        base = salary
    else:
        base = rate * calendar.days_inclusive(*window)

    separating = staff.is_separating_in(period)
    payout = leave_payout(staff, records.leave_requests, config, rate, calendar) if separating else None

    decision = evaluate_attendance_bonus(
        stats=stats,
        rules=config.attendance_bonus,
        sick_leave_days=sick_leave_days_in_month(
            records.leave_requests, period, calendar, through=min(window[1], today)
        ),
        sick_days_before=sick_days_before_month(records.leave_requests, period, calendar),
        sick_day_quota=config.sick_day_quota,
        is_eligible=staff.is_attendance_bonus_eligible,
        current_streak=staff.bonus_streak,
        policy=policy,
    )
    if separating:
        bonus, new_streak = ZERO, staff.bonus_streak
    else:
        bonus, new_streak = decision.bonus_amount, decision.new_streak

    overtime = overtime_pay(
        stats.approved_overtime_minutes,
        hourly_equivalent(salary, standard_hours_for(job, policy), policy),
        config.overtime_rate_multiplier,
    )

    base, overtime, bonus = round_money(base), round_money(overtime), round_money(bonus)
    sso = ZERO
    if staff.is_sso_registered:
        sso = round_money(statutory_contribution(base + overtime + bonus, config))

    earnings = Earnings(
        base_pay=base,
        overtime_pay=overtime,
        attendance_bonus=bonus,
        sso_allowance=sso,
        leave_payout=payout.total if payout is not None else ZERO,
        other=adjustments_of_kind(records.adjustments, AdjustmentKind.EARNING, period),
    )
    deductions = Deductions(
        absence=round_money(rate * decision.days_to_deduct),
        unexcused_absence_days=decision.unexcused_absence_count,
        sick_leave_deducted_days=decision.sick_leave.deducted_days,
        sso=sso,
        **_shared_deductions(records),
    )
    return PayrollLine(
        staff_id=staff.id,
        display_name=staff.display_name,
        period=period,
        pay_type=job.pay_type,
        position=job.position,
        department=job.department,
        earnings=earnings,
        deductions=deductions,
        previous_streak=staff.bonus_streak,
        new_streak=new_streak,
        stats=stats,
        bonus=decision,
        leave_payout=payout,
        is_separating=separating,
        missing_inputs=records.missing_inputs,
    )


def _hourly_line(
    records: StaffPeriodRecords,
    job: JobRecord,
    stats: MonthlyStats,
    config: CompanyConfig,
) -> PayrollLine:
    staff, period = records.staff, records.period
    earned = round_money(stats.worked_hours * job.rate)
    sso = ZERO
    if staff.is_sso_registered:
        sso = round_money(statutory_contribution(earned, config))

    earnings = Earnings(
        base_pay=earned,
        sso_allowance=sso,
        other=adjustments_of_kind(records.adjustments, AdjustmentKind.EARNING, period),
    )
    deductions = Deductions(sso=sso, **_shared_deductions(records))
    return PayrollLine(
        staff_id=staff.id,
        display_name=staff.display_name,
        period=period,
        pay_type=job.pay_type,
        position=job.position,
        department=job.department,
        earnings=earnings,
        deductions=deductions,
        previous_streak=staff.bonus_streak,
        new_streak=staff.bonus_streak,
        stats=stats,
        is_separating=staff.is_separating_in(period),
        missing_inputs=records.missing_inputs,
    )
