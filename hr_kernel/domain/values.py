"""
Domain value objects.

PayPeriod is the identity of a payroll month.  It validates itself on
construction so that every downstream component can rely on a real
calendar month.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from hr_kernel.exceptions import InvalidPayPeriodError


@dataclass(frozen=True, order=True)
class PayPeriod:
    """A calendar month identified by (year, month)."""

    year: int
    month: int

    def __post_init__(self) -> None:
        for value in (self.year, self.month):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidPayPeriodError(self.year, self.month)
        if not 1 <= self.month <= 12 or not 1 <= self.year <= 9999:
            raise InvalidPayPeriodError(self.year, self.month)

    @classmethod
    def of(cls, day: date) -> PayPeriod:
        return cls(day.year, day.month)

    @property
    def key(self) -> str:
        """``YYYY-MM`` form used in logs and payslip listings."""
        return f"{self.year:04d}-{self.month:02d}"

    def contains(self, day: date) -> bool:
        return day.year == self.year and day.month == self.month

    def previous(self) -> PayPeriod:
        if self.month == 1:
            return PayPeriod(self.year - 1, 12)
        return PayPeriod(self.year, self.month - 1)

    def next(self) -> PayPeriod:
        if self.month == 12:
            return PayPeriod(self.year + 1, 1)
        return PayPeriod(self.year, self.month + 1)

    def __str__(self) -> str:
        return self.key


MONEY_QUANTUM = Decimal("0.01")


def round_money(amount: Decimal) -> Decimal:
    """Quantize a monetary amount to 0.01, half up."""
    return Decimal(amount).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)
