"""
Declarative state machines for UI-facing finite-state values.

Each Transition edge may carry a guard, callable(context) -> bool, that
must be truthy for the edge to fire.

    from reactive.state_machine import StateMachine, Transition

    class DialogLifecycle(StateMachine):
        initial = "CLOSED"
        transitions = [
            Transition("CLOSED", "OPEN"),
            Transition("OPEN", "CONFIRMED",
                       guard=lambda ctx: bool(ctx["message"].strip())),
            Transition("CONFIRMED", "CLOSED"),
        ]
"""

from dataclasses import dataclass
from typing import Optional, Callable


@dataclass
class Transition:
    """A single state machine edge with an optional guard."""
    from_state: str
    to_state: str
    guard: Optional[Callable] = None


class InvalidTransition(Exception):
    """Raised when the transition edge does not exist."""

    def __init__(self, from_state, to_state, allowed):
        self.from_state = from_state
        self.to_state = to_state
        self.allowed = allowed
        super().__init__(
            f"Cannot transition from '{from_state}' to '{to_state}'. "
            f"Allowed: {allowed}"
        )


class GuardFailure(Exception):
    """Raised when a transition edge exists but the guard evaluates to False."""

    def __init__(self, from_state, to_state):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Guard failed for transition '{from_state}' → '{to_state}'"
        )


class StateMachine:
    """
    Base class for declarative state machines.

    Subclass and define:
        initial: str                    — the starting state
        transitions: list[Transition]   — list of Transition edges
    """

    initial: str = None
    transitions: list = []

    @classmethod
    def get_transition(cls, from_state, to_state):
        """Return the Transition object for this edge, or None."""
        for t in cls.transitions:
            if t.from_state == from_state and t.to_state == to_state:
                return t
        return None

    @classmethod
    def validate_transition(cls, from_state, to_state, context=None):
        """
        Validate and return the Transition object.

        Raises:
            InvalidTransition — edge doesn't exist
            GuardFailure — guard evaluated to False
        """
        t = cls.get_transition(from_state, to_state)
        if t is None:
            allowed = cls.allowed_transitions(from_state)
            raise InvalidTransition(from_state, to_state, allowed)

        if t.guard is not None and not t.guard(context):
            raise GuardFailure(from_state, to_state)

        return t

    @classmethod
    def can_transition(cls, from_state, to_state, context=None) -> bool:
        """True if the edge exists and its guard passes."""
        try:
            cls.validate_transition(from_state, to_state, context)
        except (InvalidTransition, GuardFailure):
            return False
        return True

    @classmethod
    def allowed_transitions(cls, from_state):
        """Return list of valid next state names from from_state."""
        return [t.to_state for t in cls.transitions if t.from_state == from_state]
