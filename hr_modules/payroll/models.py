"""
Payroll Run Models (``hr_modules.payroll.models``).

Responsibility
--------------
Frozen dataclass results of the payroll run service: the preview with its
per-row errors and skips, and the outcomes of finalize and revert.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Returned to
callers of ``PayrollRunService``.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* A partial preview (deadline reached) is never persistable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from hr_engines.payroll_calculator import PayrollLine
from hr_kernel.domain.values import PayPeriod


class PayslipState(Enum):
    """Lifecycle of one staff member's payslip within a period."""
    NOT_ELIGIBLE = "not_eligible"
    PENDING = "pending"
    PREVIEWED = "previewed"
    FINALIZED = "finalized"
    REVERTED = "reverted"


@dataclass(frozen=True)
class RowError:
    """A staff row that failed without aborting the run."""
    staff_id: str
    code: str
    message: str


@dataclass(frozen=True)
class SkippedStaff:
    staff_id: str
    reason: str
    state: PayslipState = PayslipState.NOT_ELIGIBLE


@dataclass(frozen=True)
class PayrollRunPreview:
    """Computed, unpersisted payroll for one period.

    ``unfinished_staff_ids`` lists rows the deadline cut off; a preview
    with any of them is partial.
    """
    period: PayPeriod
    generated_at: datetime
    lines: tuple[PayrollLine, ...] = ()
    errors: tuple[RowError, ...] = ()
    skipped: tuple[SkippedStaff, ...] = ()
    unfinished_staff_ids: tuple[str, ...] = ()
    is_fully_finalized: bool = False
    states: dict[str, PayslipState] = field(default_factory=dict)

    @property
    def is_partial(self) -> bool:
        return bool(self.unfinished_staff_ids)

    @property
    def total_net_pay(self) -> Decimal:
        return sum((line.net_pay for line in self.lines), Decimal("0"))

    def line_for(self, staff_id: str) -> PayrollLine | None:
        for line in self.lines:
            if line.staff_id == staff_id:
                return line
        return None


@dataclass(frozen=True)
class FinalizeResult:
    period: PayPeriod
    payslip_ids: tuple[str, ...]
    total_net_pay: Decimal
    finalized_at: datetime
    finalized_by: str


@dataclass(frozen=True)
class RevertResult:
    reverted_payslip_ids: tuple[str, ...]
    reverted_at: datetime
    reverted_by: str
