"""
Module: hr_engines.bonus_streak
Responsibility:
    Decide each month's attendance-bonus outcome: disqualification, the
    next streak value, the tiered bonus amount, and the days to deduct for
    unexcused absences and sick-leave violations.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Streak transition: ineligible -> unchanged; disqualified -> 0;
      otherwise +1.  ``revert_month`` is its exact inverse given the prior
      streak recorded at finalize time.
    - Bonus is a pure function of the new streak: 1 -> month1,
      2 -> month2, 3 and above -> month3.
    - Sick-leave walk is chronological with a yearly counter seeded at the
      days used before the month.  Each sick day is classified once:
        quota overflow                 deducted, disqualifies
        no certificate, long request   deducted, disqualifies
        no certificate, short request  disqualifies only

Failure modes:
    - BonusRulesNotFoundError when rules are missing.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from hr_engines.monthly_aggregator import MonthlyStats
from hr_engines.tracer import traced_engine
from hr_kernel.domain.policy import DEFAULT_POLICY, PayrollPolicy
from hr_kernel.domain.records import AttendanceBonusRules, LeaveRequest
from hr_kernel.exceptions import BonusRulesNotFoundError

ZERO = Decimal("0")

REASON_TOO_MANY_LATES = "too_many_lates"
REASON_TOO_MANY_LATE_MINUTES = "too_many_late_minutes"
REASON_TOO_MANY_ABSENCES = "too_many_absences"
REASON_SICK_QUOTA_EXCEEDED = "sick_quota_exceeded"
REASON_SICK_LEAVE_WITHOUT_CERTIFICATE = "sick_leave_without_certificate"


@dataclass(frozen=True)
class SickLeaveAssessment:
    quota_overflow_days: int = 0
    uncertified_long_days: int = 0
    uncertified_short_days: int = 0
    year_to_date_sick_days: int = 0

    @property
    def deducted_days(self) -> int:
        return self.quota_overflow_days + self.uncertified_long_days

    @property
    def disqualifies(self) -> bool:
        return bool(
            self.quota_overflow_days
            or self.uncertified_long_days
            or self.uncertified_short_days
        )

    @property
    def reasons(self) -> tuple[str, ...]:
        reasons = []
        if self.quota_overflow_days:
            reasons.append(REASON_SICK_QUOTA_EXCEEDED)
        if self.uncertified_long_days or self.uncertified_short_days:
            reasons.append(REASON_SICK_LEAVE_WITHOUT_CERTIFICATE)
        return tuple(reasons)


@dataclass(frozen=True)
class BonusDecision:
    """Outcome of one month's attendance-bonus evaluation."""
    previous_streak: int
    new_streak: int
    bonus_amount: Decimal
    is_eligible: bool
    is_disqualified: bool
    reasons: tuple[str, ...]
    unexcused_absence_count: int
    sick_leave: SickLeaveAssessment

    @property
    def days_to_deduct(self) -> int:
        return self.unexcused_absence_count + self.sick_leave.deducted_days


def assess_sick_leave(
    sick_days: Sequence[tuple[date, LeaveRequest]],
    sick_days_before: int,
    sick_day_quota: int,
    policy: PayrollPolicy = DEFAULT_POLICY,
) -> SickLeaveAssessment:
    counter = sick_days_before
    overflow = long_days = short_days = 0
    for _day, request in sorted(sick_days, key=lambda item: item[0]):
        counter += 1
        if counter > sick_day_quota:
            overflow += 1
        elif not request.mc_received:
            if request.total_days >= policy.long_sick_leave_days:
                long_days += 1
            else:
                short_days += 1
    return SickLeaveAssessment(
        quota_overflow_days=overflow,
        uncertified_long_days=long_days,
        uncertified_short_days=short_days,
        year_to_date_sick_days=counter,
    )


def attendance_violations(stats: MonthlyStats, rules: AttendanceBonusRules) -> tuple[str, ...]:
    reasons = []
    if stats.late_count > rules.allowed_lates:
        reasons.append(REASON_TOO_MANY_LATES)
    if stats.late_minutes_sum > rules.max_late_minutes_allowed:
        reasons.append(REASON_TOO_MANY_LATE_MINUTES)
    if stats.unexcused_absence_count > rules.allowed_absences:
        reasons.append(REASON_TOO_MANY_ABSENCES)
    return tuple(reasons)


def apply_month(streak: int, disqualified: bool, eligible: bool) -> int:
    if not eligible:
        return streak
    if disqualified:
        return 0
    return streak + 1


def revert_month(new_streak: int, previous_streak: int | None) -> int:
    """Streak before the month was applied.

    Payslips written before the prior value was recorded fall back to
    ``max(new_streak - 1, 0)``, which is only exact for one finalize per month.
    """
    if previous_streak is not None:
        return previous_streak
    return max(new_streak - 1, 0)


def bonus_amount_for_streak(streak: int, rules: AttendanceBonusRules) -> Decimal:
    if streak <= 0:
        return ZERO
    if streak == 1:
        return rules.month1
    if streak == 2:
        return rules.month2
    return rules.month3


@traced_engine(
    "bonus_streak",
    "1.0",
    fingerprint_fields=("stats", "rules", "sick_days_before", "current_streak", "is_eligible"),
)
def evaluate_attendance_bonus(
    stats: MonthlyStats,
    rules: AttendanceBonusRules | None,
    sick_leave_days: Sequence[tuple[date, LeaveRequest]],
    sick_days_before: int,
    sick_day_quota: int,
    is_eligible: bool,
    current_streak: int,
    policy: PayrollPolicy = DEFAULT_POLICY,
) -> BonusDecision:
    if rules is None:
        raise BonusRulesNotFoundError()

    sick = assess_sick_leave(sick_leave_days, sick_days_before, sick_day_quota, policy)
    reasons = attendance_violations(stats, rules) + sick.reasons
    disqualified = bool(reasons)

    new_streak = apply_month(current_streak, disqualified, is_eligible)
    bonus = ZERO
    if is_eligible and not disqualified:
        bonus = bonus_amount_for_streak(new_streak, rules)

    return BonusDecision(
        previous_streak=current_streak,
        new_streak=new_streak,
        bonus_amount=bonus,
        is_eligible=is_eligible,
        is_disqualified=disqualified,
        reasons=reasons,
        unexcused_absence_count=stats.unexcused_absence_count,
        sick_leave=sick,
    )
