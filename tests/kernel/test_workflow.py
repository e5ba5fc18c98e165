"""Tests for the workflow primitives and the payslip lifecycle."""

import pytest

from hr_kernel.domain.workflow import Transition, Workflow
from hr_kernel.exceptions import InvalidTransitionError
from hr_modules.payroll.models import PayslipState
from hr_modules.payroll.workflows import NO_LATER_PAYSLIP, PAYSLIP_WORKFLOW, STREAK_UNCHANGED, advance


class TestWorkflowValidation:
    """Workflow.__post_init__ structural checks."""

    def test_initial_state_must_exist(self):
        with pytest.raises(ValueError):
            Workflow(name="w", description="", initial_state="x", states=("a",), transitions=())

    def test_transition_states_must_exist(self):
        with pytest.raises(ValueError):
            Workflow(
                name="w", description="", initial_state="a", states=("a",),
                transitions=(Transition("a", "b", action="go"),),
            )

    def test_terminal_state_has_no_exits(self):
        with pytest.raises(ValueError):
            Workflow(
                name="w", description="", initial_state="a", states=("a", "b"),
                transitions=(Transition("b", "a", action="back"),),
                terminal_states=("b",),
            )


class TestPayslipWorkflow:
    """The per-staff payslip lifecycle."""

    def test_happy_path(self):
        state = PayslipState.PENDING
        state = advance(state, "preview")
        assert state is PayslipState.PREVIEWED
        state = advance(state, "finalize")
        assert state is PayslipState.FINALIZED
        state = advance(state, "revert")
        assert state is PayslipState.REVERTED
        assert advance(state, "reopen") is PayslipState.PENDING

    def test_cannot_finalize_without_preview(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            advance(PayslipState.PENDING, "finalize")
        assert exc_info.value.code == "INVALID_TRANSITION"
        assert exc_info.value.from_state == "pending"

    def test_not_eligible_is_terminal(self):
        state = advance(PayslipState.PENDING, "exclude")
        assert state is PayslipState.NOT_ELIGIBLE
        with pytest.raises(InvalidTransitionError):
            advance(state, "preview")

    def test_store_writing_transitions_are_guarded(self):
        finalize = PAYSLIP_WORKFLOW.transition_for("previewed", "finalize")
        revert = PAYSLIP_WORKFLOW.transition_for("finalized", "revert")
        assert finalize.guard is STREAK_UNCHANGED and finalize.writes_store
        assert revert.guard is NO_LATER_PAYSLIP and revert.writes_store
