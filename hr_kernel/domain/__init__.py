"""
Pure domain layer.

Immutable value objects, records, policy, clock and calendar with NO
dependencies on the ORM, the database or I/O.
"""

from hr_kernel.domain.calendar import BusinessCalendar
from hr_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from hr_kernel.domain.policy import DEFAULT_POLICY, PayrollPolicy
from hr_kernel.domain.values import PayPeriod, round_money

__all__ = [
    "BusinessCalendar",
    "Clock",
    "DEFAULT_POLICY",
    "DeterministicClock",
    "PayPeriod",
    "PayrollPolicy",
    "SystemClock",
    "round_money",
]
