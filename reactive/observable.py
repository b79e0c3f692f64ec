"""
ObservableState — a finite-state value backed by a reaktiv Signal.

The current state is a Signal, so Computed values derived from it stay
in sync without polling. Transitions only happen through transition(),
which validates the edge against a StateMachine table and then notifies
subscribers synchronously with (from_state, to_state).

    machine = ObservableState(DialogLifecycle)
    machine.subscribe(lambda old, new: print(f"{old} -> {new}"))
    machine.transition("OPEN")
"""

import logging
import threading

from reaktiv import Signal

from reactive.state_machine import StateMachine


logger = logging.getLogger(__name__)


class ObservableState:
    """Current state of a StateMachine plus its subscribers."""

    def __init__(self, machine: type, initial: str = None):
        if not (isinstance(machine, type) and issubclass(machine, StateMachine)):
            raise TypeError(f"{machine!r} is not a StateMachine subclass")
        start = initial if initial is not None else machine.initial
        if start is None:
            raise ValueError(f"{machine.__name__} has no initial state")
        self.machine = machine
        self._signal = Signal(start)
        self._listeners = []
        self._lock = threading.Lock()

    @property
    def signal(self) -> Signal:
        """The underlying reaktiv Signal (read-only by convention)."""
        return self._signal

    @property
    def value(self) -> str:
        return self._signal()

    def __call__(self) -> str:
        return self._signal()

    def can(self, to_state, context=None) -> bool:
        return self.machine.can_transition(self.value, to_state, context)

    def transition(self, to_state, context=None) -> str:
        """Move to to_state. Returns the previous state.

        Raises InvalidTransition / GuardFailure from the machine, leaving
        the state unchanged.
        """
        from_state = self.value
        self.machine.validate_transition(from_state, to_state, context)
        self._signal.set(to_state)
        self._emit(from_state, to_state)
        return from_state

    # ── Subscriptions ────────────────────────────────────────────────

    def subscribe(self, callback):
        """Register callback(from_state, to_state). Returns an unsubscribe fn."""
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, from_state, to_state):
        with self._lock:
            listeners = list(self._listeners)
        for cb in listeners:
            try:
                cb(from_state, to_state)
            except Exception:
                logger.exception(
                    "State listener failed on %s -> %s", from_state, to_state
                )

    def __repr__(self):
        return f"ObservableState({self.machine.__name__}, {self.value!r})"
