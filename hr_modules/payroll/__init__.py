"""
Payroll Module (``hr_modules.payroll``).

Responsibility
--------------
Payroll runs for one pay period: preview, finalize and revert, plus the
per-staff payslip workflow.

Architecture position
---------------------
**Modules layer** -- result models, the payslip workflow and a service
facade that delegates all arithmetic to ``hr_engines.payroll_calculator``.
"""

from hr_modules.payroll.models import (
    FinalizeResult,
    PayrollRunPreview,
    PayslipState,
    RevertResult,
    RowError,
    SkippedStaff,
)
from hr_modules.payroll.service import PayrollRunService
from hr_modules.payroll.workflows import PAYSLIP_WORKFLOW

__all__ = [
    "FinalizeResult",
    "PAYSLIP_WORKFLOW",
    "PayrollRunPreview",
    "PayrollRunService",
    "PayslipState",
    "RevertResult",
    "RowError",
    "SkippedStaff",
]
