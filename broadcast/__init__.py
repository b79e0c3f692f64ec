"""
Broadcasts: positions shared with a short message.

BroadcastLog persists records append-only; BroadcastDialog is the
confirm/auto-dismiss state machine that feeds it.
"""

from broadcast.log import (
    BroadcastLog, BroadcastRecord, BroadcastValidationError,
    BroadcastPersistenceError, BROADCAST_KEY, MAX_MESSAGE_LENGTH,
)
from broadcast.dialog import BroadcastDialog, DialogLifecycle, CLOSED, OPEN, CONFIRMED
