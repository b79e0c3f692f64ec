"""
BroadcastDialog — state machine behind the "share position" dialog.

    CLOSED --open_with_position(p)--> OPEN
    OPEN   --edit_message(text)-----> OPEN       (clamped to 240 chars)
    OPEN   --submit()---------------> CONFIRMED  (only with a non-blank message)
    CONFIRMED --(1.5s elapsed)------> CLOSED
    OPEN   --cancel()---------------> CLOSED

close() force-closes from any state and cancels the pending auto-close,
so a late timer never acts on a dialog that has since been reopened.

State, message and position are reaktiv Signals; can_submit and
char_count are Computed values derived from them.
"""

import logging
from typing import Optional

from reaktiv import Signal, Computed, batch

from broadcast.log import BroadcastLog, BroadcastRecord, BroadcastPersistenceError, MAX_MESSAGE_LENGTH
from feed.scheduler import Scheduler, ScheduledTask
from reactive.observable import ObservableState
from reactive.state_machine import StateMachine, Transition, InvalidTransition
from tables.models import Position


logger = logging.getLogger(__name__)

CLOSED = "CLOSED"
OPEN = "OPEN"
CONFIRMED = "CONFIRMED"

AUTO_CLOSE_DELAY = 1.5


def _has_message(ctx):
    return bool(ctx and ctx.get("message", "").strip())


class DialogLifecycle(StateMachine):
    initial = CLOSED
    transitions = [
        Transition(CLOSED, OPEN),
        Transition(OPEN, CONFIRMED, guard=_has_message),
        Transition(OPEN, CLOSED),
        Transition(CONFIRMED, CLOSED),
    ]


class BroadcastDialog:
    """
    Drives one broadcast dialog against a BroadcastLog.

    Usage:
        dialog = BroadcastDialog(log, scheduler)
        dialog.open_with_position(position)
        dialog.edit_message("gm")
        dialog.submit()           # True, state is CONFIRMED
        scheduler.advance(1.5)    # state is CLOSED
    """

    def __init__(
        self,
        log: BroadcastLog,
        scheduler: Scheduler,
        auto_close_delay: float = AUTO_CLOSE_DELAY,
        max_length: int = MAX_MESSAGE_LENGTH,
    ):
        self.log = log
        self.scheduler = scheduler
        self.auto_close_delay = auto_close_delay
        self.max_length = max_length

        self._state = ObservableState(DialogLifecycle)
        self._message = Signal("")
        self._position = Signal(None)
        self._can_submit = Computed(
            lambda: self._state() == OPEN and bool(self._message().strip())
        )
        self._char_count = Computed(lambda: len(self._message()))
        self._auto_close: Optional[ScheduledTask] = None
        self.last_record: Optional[BroadcastRecord] = None
        self.last_error: Optional[Exception] = None

    # ── Observables ──────────────────────────────────────────────────

    @property
    def state(self) -> str:
        return self._state()

    @property
    def message(self) -> str:
        return self._message()

    @property
    def position(self) -> Optional[Position]:
        return self._position()

    @property
    def can_submit(self) -> bool:
        return self._can_submit()

    @property
    def char_count(self) -> int:
        return self._char_count()

    @property
    def counter(self) -> str:
        """Character counter as shown under the text box, e.g. '2/240'."""
        return f"{self.char_count}/{self.max_length}"

    @property
    def placeholder(self) -> str:
        symbol = self.position.symbol if self.position is not None else ""
        return f"Share your thoughts about {symbol}..."

    @property
    def auto_close_pending(self) -> bool:
        return self._auto_close is not None and self._auto_close.pending

    def subscribe(self, callback):
        """callback(from_state, to_state) on every transition. Returns unsubscribe."""
        return self._state.subscribe(callback)

    # ── Operations ───────────────────────────────────────────────────

    def open_with_position(self, position: Position) -> None:
        self._require(OPEN)
        with batch():
            self._position.set(position)
            self._message.set("")
        self.last_error = None
        self._state.transition(OPEN)

    def edit_message(self, text: str) -> str:
        """Replace the message buffer, clamped to max_length. Returns the stored text."""
        if self.state != OPEN:
            raise InvalidTransition(self.state, OPEN, DialogLifecycle.allowed_transitions(self.state))
        clamped = text[:self.max_length]
        self._message.set(clamped)
        return clamped

    def submit(self) -> bool:
        """Persist the broadcast and confirm.

        Returns False (and does nothing) while the message is blank.
        If the log cannot persist, the dialog stays OPEN and the
        BroadcastPersistenceError propagates to the caller.
        """
        if self.state != OPEN:
            raise InvalidTransition(self.state, CONFIRMED, DialogLifecycle.allowed_transitions(self.state))
        context = {"message": self.message}
        if not DialogLifecycle.can_transition(OPEN, CONFIRMED, context):
            return False

        try:
            record = self.log.append(self.position, self.message)
        except BroadcastPersistenceError as e:
            self.last_error = e
            logger.warning("Broadcast not saved, dialog stays open: %s", e)
            raise

        self.last_record = record
        self.last_error = None
        self._state.transition(CONFIRMED, context)
        self._auto_close = self.scheduler.call_later(
            self.auto_close_delay, self._on_auto_close,
        )
        return True

    def cancel(self) -> None:
        """User cancellation while editing. Nothing is appended."""
        self._require(CLOSED, from_state=OPEN)
        self._close()

    def close(self) -> None:
        """Force-close from any state, dropping a pending auto-close."""
        self._cancel_auto_close()
        if self.state != CLOSED:
            self._close()

    # ── Internal ─────────────────────────────────────────────────────

    def _on_auto_close(self):
        self._auto_close = None
        if self.state == CONFIRMED:
            self._close()

    def _close(self):
        self._cancel_auto_close()
        with batch():
            self._message.set("")
            self._position.set(None)
        self._state.transition(CLOSED)

    def _cancel_auto_close(self):
        if self._auto_close is not None:
            self._auto_close.cancel()
            self._auto_close = None

    def _require(self, to_state, from_state=None):
        current = self.state
        if from_state is not None and current != from_state:
            raise InvalidTransition(current, to_state, DialogLifecycle.allowed_transitions(current))
        DialogLifecycle.validate_transition(current, to_state)

    def __repr__(self):
        return f"BroadcastDialog(state={self.state!r}, chars={self.char_count})"
