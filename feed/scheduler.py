"""
Cancellable single-shot scheduling.

Every delayed callback in the engine goes through a Scheduler and is
represented by a ScheduledTask handle. Cancelling the handle is the only
way to prevent the callback; a cancelled task never runs.

Two backends:
- AsyncioScheduler: wraps loop.call_later for a running event loop.
- ManualScheduler:  virtual clock advanced explicitly (tests, headless use).
"""

import asyncio
import heapq
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class ScheduledTask:
    """Handle to one pending callback. Cancel at most once; fire at most once."""

    __slots__ = ("_callback", "_cancelled", "_done", "_handle", "due")

    def __init__(self, callback: Callable[[], None], due: float = 0.0):
        self._callback = callback
        self._cancelled = False
        self._done = False
        self._handle = None
        self.due = due

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        return self._done

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._done)

    def cancel(self) -> bool:
        """Prevent the callback from running.

        Returns True if this call cancelled a pending task, False if the
        task had already run or was already cancelled.
        """
        if not self.pending:
            return False
        self._cancelled = True
        self._callback = None
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        return True

    def _run(self):
        if not self.pending:
            return
        self._done = True
        callback, self._callback = self._callback, None
        self._handle = None
        callback()

    def __repr__(self):
        status = "cancelled" if self._cancelled else "done" if self._done else "pending"
        return f"<ScheduledTask due={self.due:.3f} {status}>"


class Scheduler(ABC):
    """Backend-swappable single-shot timer source."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        """Run callback once after delay seconds. Returns its handle."""

    @abstractmethod
    def time(self) -> float:
        """Current time on this scheduler's clock, in seconds."""


class AsyncioScheduler(Scheduler):
    """Schedules callbacks on an asyncio event loop.

    If no loop is given, the running loop is looked up on each call, so
    the scheduler must be used from inside a coroutine or loop callback.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def _get_loop(self):
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def call_later(self, delay, callback):
        loop = self._get_loop()
        task = ScheduledTask(callback, due=loop.time() + delay)
        task._handle = loop.call_later(delay, task._run)
        return task

    def time(self):
        return self._get_loop().time()


class ManualScheduler(Scheduler):
    """
    Deterministic virtual-time scheduler.

    Nothing runs until advance() is called. Callbacks scheduled from
    inside a callback are picked up in the same advance() if they fall
    due within the window.

        sched = ManualScheduler()
        task = sched.call_later(1.5, close_dialog)
        sched.advance(1.0)   # nothing yet
        sched.advance(0.5)   # close_dialog runs
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue = []
        self._seq = itertools.count()

    def time(self):
        return self._now

    def call_later(self, delay, callback):
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        task = ScheduledTask(callback, due=self._now + delay)
        heapq.heappush(self._queue, (task.due, next(self._seq), task))
        return task

    def pending(self) -> int:
        """Number of tasks still waiting to run."""
        return sum(1 for _, _, t in self._queue if t.pending)

    def next_due(self) -> Optional[float]:
        """Due time of the earliest pending task, or None."""
        self._discard_inactive()
        return self._queue[0][0] if self._queue else None

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every task that falls due.

        Returns the number of callbacks that ran.
        """
        if seconds < 0:
            raise ValueError(f"cannot advance by a negative amount: {seconds}")
        target = self._now + seconds
        ran = 0
        while True:
            self._discard_inactive()
            if not self._queue or self._queue[0][0] > target:
                break
            due, _, task = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            task._run()
            ran += 1
        self._now = target
        return ran

    def run_next(self) -> bool:
        """Jump to the earliest pending task and run it. False if idle."""
        due = self.next_due()
        if due is None:
            return False
        self.advance(max(0.0, due - self._now))
        return True

    def _discard_inactive(self):
        while self._queue and not self._queue[0][2].pending:
            heapq.heappop(self._queue)
