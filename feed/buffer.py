"""
BoundedEventBuffer — the most recent N trade events, newest first.
"""

from collections import deque
from typing import Optional, Tuple

from feed.models import TradeEvent


DEFAULT_CAPACITY = 50


class BoundedEventBuffer:
    """
    Fixed-capacity store of events ordered by descending id.

    push() inserts at the front and lets the deque drop the oldest entry
    from the back once capacity is reached; both are O(1). Readers get a
    tuple from snapshot(), so later pushes never change what they iterate.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._events = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def head(self) -> Optional[TradeEvent]:
        """The newest event, or None when empty."""
        return self._events[0] if self._events else None

    def push(self, event: TradeEvent) -> None:
        """Insert event as the newest entry, evicting the oldest if full.

        Raises ValueError if event.id does not exceed the current head id.
        """
        head = self.head
        if head is not None and event.id <= head.id:
            raise ValueError(
                f"event id {event.id} is not newer than head id {head.id}"
            )
        self._events.appendleft(event)

    def snapshot(self) -> Tuple[TradeEvent, ...]:
        """Immutable newest-first copy of the current contents."""
        return tuple(self._events)

    def clear(self) -> None:
        self._events.clear()

    def __len__(self):
        return len(self._events)

    def __bool__(self):
        return bool(self._events)

    def __repr__(self):
        return f"BoundedEventBuffer({len(self)}/{self._capacity})"
