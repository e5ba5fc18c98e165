"""
PayrollPolicy -- named, versioned constants shared by every call site.

Responsibility:
    One immutable policy object is built at startup (see ``hr_config``) and
    injected into the dashboard summary, bonus calculator, payroll run,
    advance eligibility and live estimate so they cannot drift apart on
    grace periods, break rules or proration divisors.

Architecture position:
    Kernel > Domain -- pure value object, zero I/O.

Failure modes:
    - ValueError from ``__post_init__`` on out-of-range values.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class PayrollPolicy:
    """Versioned calculation policy.

    ``late_grace_minutes`` defaults to 0: check-in strictly after the
    scheduled start is late.  Non-zero grace is a product decision that
    must be configured explicitly.
    """

    version: str = "2025.10"
    timezone: str = "Asia/Bangkok"
    late_grace_minutes: int = 0
    default_break_minutes: int = 60
    default_checkout_time: str = "23:00"
    standard_day_hours: Decimal = Decimal("8")
    hourly_equivalent_days: int = 30
    long_sick_leave_days: int = 3
    payroll_cutover: date = date(2025, 10, 1)
    auto_fix_shift_hours: int = 9

    def __post_init__(self) -> None:
        if not self.version:
            raise ValueError("policy version is required")
        if self.late_grace_minutes < 0:
            raise ValueError("late_grace_minutes cannot be negative")
        if self.default_break_minutes < 0:
            raise ValueError("default_break_minutes cannot be negative")
        if self.standard_day_hours <= 0:
            raise ValueError("standard_day_hours must be positive")
        if self.hourly_equivalent_days <= 0:
            raise ValueError("hourly_equivalent_days must be positive")
        if self.long_sick_leave_days < 1:
            raise ValueError("long_sick_leave_days must be at least 1")
        if not 1 <= self.auto_fix_shift_hours <= 24:
            raise ValueError("auto_fix_shift_hours must be between 1 and 24")


DEFAULT_POLICY = PayrollPolicy()
