"""Payroll Workflows.

State machine for one staff member's payslip within a pay period.
"""

from hr_kernel.domain.workflow import Guard, Transition, Workflow
from hr_kernel.logging_config import get_logger
from hr_modules.payroll.models import PayslipState

logger = get_logger("modules.payroll.workflows")


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

STREAK_UNCHANGED = Guard(
    name="streak_unchanged",
    description="Staff bonus streak still equals the value the line was computed from",
)

NO_LATER_PAYSLIP = Guard(
    name="no_later_payslip",
    description="No payslip exists for the staff member in a later period",
)

logger.info(
    "payslip_workflow_guards_defined",
    extra={"guards": [STREAK_UNCHANGED.name, NO_LATER_PAYSLIP.name]},
)


# -----------------------------------------------------------------------------
# Payslip Workflow
# -----------------------------------------------------------------------------

PAYSLIP_WORKFLOW = Workflow(
    name="payslip",
    description="Per-staff payslip lifecycle within one pay period",
    initial_state=PayslipState.PENDING.value,
    states=tuple(s.value for s in PayslipState),
    transitions=(
        Transition(PayslipState.PENDING.value, PayslipState.NOT_ELIGIBLE.value, action="exclude"),
        Transition(PayslipState.PENDING.value, PayslipState.PREVIEWED.value, action="preview"),
        Transition(
            PayslipState.PREVIEWED.value,
            PayslipState.FINALIZED.value,
            action="finalize",
            guard=STREAK_UNCHANGED,
            writes_store=True,
        ),
        Transition(
            PayslipState.FINALIZED.value,
            PayslipState.REVERTED.value,
            action="revert",
            guard=NO_LATER_PAYSLIP,
            writes_store=True,
        ),
        Transition(PayslipState.REVERTED.value, PayslipState.PENDING.value, action="reopen"),
    ),
    terminal_states=(PayslipState.NOT_ELIGIBLE.value,),
)


def advance(state: PayslipState, action: str) -> PayslipState:
    """Apply ``action`` to ``state``; raises InvalidTransitionError."""
    return PayslipState(PAYSLIP_WORKFLOW.next_state(state.value, action))
