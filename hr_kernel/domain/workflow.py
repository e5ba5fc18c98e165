"""
Canonical workflow types (``hr_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for per-record state machines (the payslip lifecycle
of a staff member within one pay period).  ``Workflow.next_state`` is the
single place where an action is checked against the allowed transitions.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
* Terminal states have no outgoing transitions.
"""

from __future__ import annotations

from dataclasses import dataclass

from hr_kernel.exceptions import InvalidTransitionError


@dataclass(frozen=True)
class Guard:
    """A condition that must be satisfied before a transition fires.

    Descriptive only; the owning service evaluates the condition.
    """
    name: str
    description: str


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow.

    ``writes_store=True`` marks transitions whose side effects are persisted.
    """
    from_state: str
    to_state: str
    action: str
    guard: Guard | None = None
    writes_store: bool = False


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a record lifecycle."""
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"{self.name}: initial state {self.initial_state!r} not in states"
            )
        for t in self.transitions:
            if t.from_state not in self.states or t.to_state not in self.states:
                raise ValueError(
                    f"{self.name}: transition {t.action!r} references unknown state"
                )
            if t.from_state in self.terminal_states:
                raise ValueError(
                    f"{self.name}: terminal state {t.from_state!r} has outgoing "
                    f"transition {t.action!r}"
                )

    def transition_for(self, from_state: str, action: str) -> Transition:
        for t in self.transitions:
            if t.from_state == from_state and t.action == action:
                return t
        raise InvalidTransitionError(self.name, from_state, action)

    def next_state(self, from_state: str, action: str) -> str:
        """Return the target state, or raise InvalidTransitionError."""
        return self.transition_for(from_state, action).to_state
