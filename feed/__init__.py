"""
Synthetic live trade feed.

EventGenerator synthesizes TradeEvents on a chained random schedule and
pushes them into a BoundedEventBuffer; readers take snapshots.
"""

from feed.models import TradeEvent, BUY, SELL
from feed.config import FeedConfig, IDENTITY_LABELS
from feed.buffer import BoundedEventBuffer
from feed.scheduler import ScheduledTask, Scheduler, AsyncioScheduler, ManualScheduler
from feed.generator import EventGenerator

__all__ = [
    "TradeEvent", "BUY", "SELL", "FeedConfig", "IDENTITY_LABELS",
    "BoundedEventBuffer", "ScheduledTask", "Scheduler", "AsyncioScheduler",
    "ManualScheduler", "EventGenerator",
]
