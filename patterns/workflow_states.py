"""Enum-based workflow state machine pattern.

Defines workflow states as Python enums with explicit transition validation.
The state definitions are independent of the storage layer; models store the
enum value and ask this module whether a move is allowed.

Example domain: the loan lifecycle.
"""

from enum import Enum


# ---------------------------------------------------------------------------
# State definitions
# ---------------------------------------------------------------------------

class LoanState(str, Enum):
    """Loan lifecycle states."""

    OUTSTANDING = "outstanding"
    RETURNED = "returned"


# ---------------------------------------------------------------------------
# Transition rules
# ---------------------------------------------------------------------------

# Allowed transitions: {current_state: [allowed_next_states]}
# Returning an already returned loan is a no-op, not an error.
_LOAN_TRANSITIONS: dict[LoanState, list[LoanState]] = {
    LoanState.OUTSTANDING: [LoanState.RETURNED],
    LoanState.RETURNED: [LoanState.RETURNED],
}


def can_transition(current: LoanState, to_state: LoanState) -> bool:
    """Check if a transition is allowed from the current state."""
    return to_state in _LOAN_TRANSITIONS.get(current, [])


def transition(current: LoanState, to_state: LoanState) -> LoanState:
    """Validate a transition and return the new state.

    Raises ValueError if the transition is not allowed.
    """
    if not can_transition(current, to_state):
        allowed = [s.value for s in _LOAN_TRANSITIONS.get(current, [])]
        raise ValueError(
            f"Cannot transition from {current.value} to {to_state.value}. "
            f"Allowed: {allowed}"
        )
    return to_state


def is_active(state: LoanState) -> bool:
    """An active loan is one that has not been returned."""
    return state != LoanState.RETURNED
