"""
Module: hr_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines.  This is
    the canonical import surface for ``hr_modules``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import hr_kernel.domain, hr_kernel.exceptions and
    hr_kernel.logging_config.  MUST NOT import hr_modules or hr_config.

Invariants enforced:
    - Purity: engines NEVER read the clock.  "Today" is a parameter derived
      by the caller through BusinessCalendar.today(clock).
    - Decimal-only arithmetic for money.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Aggregation, bonus, payroll, advance and estimate invocations are traced
    via ``@traced_engine``, emitting HR_ENGINE_TRACE log records.
"""

from hr_engines.advance_eligibility import AdvanceEligibility, calculate_advance_eligibility
from hr_engines.attendance_status import DayResolution, DayStatus, resolve_day
from hr_engines.bonus_streak import (
    BonusDecision,
    SickLeaveAssessment,
    apply_month,
    assess_sick_leave,
    bonus_amount_for_streak,
    evaluate_attendance_bonus,
    revert_month,
)
from hr_engines.monthly_aggregator import (
    MonthlyStats,
    active_window,
    aggregate,
    expand_leave_days,
    sick_days_before_month,
    sick_leave_days_in_month,
)
from hr_engines.pay_estimate import PayEstimate, project_live_pay
from hr_engines.payroll_calculator import (
    Deductions,
    Earnings,
    LeavePayout,
    PayrollLine,
    calculate_payroll_line,
    check_run_period,
    daily_rate,
    hourly_equivalent,
    ineligibility_reason,
    statutory_contribution,
)

__all__ = [
    "AdvanceEligibility",
    "BonusDecision",
    "DayResolution",
    "DayStatus",
    "Deductions",
    "Earnings",
    "LeavePayout",
    "MonthlyStats",
    "PayEstimate",
    "PayrollLine",
    "SickLeaveAssessment",
    "active_window",
    "aggregate",
    "apply_month",
    "assess_sick_leave",
    "bonus_amount_for_streak",
    "calculate_advance_eligibility",
    "calculate_payroll_line",
    "check_run_period",
    "daily_rate",
    "evaluate_attendance_bonus",
    "expand_leave_days",
    "hourly_equivalent",
    "ineligibility_reason",
    "project_live_pay",
    "resolve_day",
    "revert_month",
    "sick_days_before_month",
    "sick_leave_days_in_month",
    "statutory_contribution",
]
