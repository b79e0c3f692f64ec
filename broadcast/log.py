"""
BroadcastLog — append-only record of positions shared with a message.

The collection lives in a KeyValueStore under one fixed key as a JSON
array of {"pos": {...}, "message": str, "time": ISO-8601}. Appending is
read-modify-write: read the whole array, add one element, write the
whole array back. Two writers appending at the same moment can lose one
record; the log assumes a single writer.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional

from store.kv import KeyValueStore, StoreError
from tables.models import Position


logger = logging.getLogger(__name__)

BROADCAST_KEY = "fluxpool-broadcasts"
MAX_MESSAGE_LENGTH = 240

# Position attribute → persisted field name
_POSITION_WIRE = (
    ("id", "id"),
    ("symbol", "symbol"),
    ("kind", "type"),
    ("size", "size"),
    ("entry_price", "entry"),
    ("current_price", "current"),
    ("pnl", "pnl"),
    ("pnl_percent", "pnlPercent"),
    ("curve_name", "curve"),
)


class BroadcastValidationError(Exception):
    """Raised when a broadcast message is rejected before anything is written."""

    def __init__(self, message, reason):
        self.message = message
        self.reason = reason
        super().__init__(f"Invalid broadcast message: {reason}")


class BroadcastPersistenceError(Exception):
    """Raised when the broadcast collection cannot be read or written."""

    def __init__(self, key, cause):
        self.key = key
        self.cause = cause
        super().__init__(f"Broadcast collection '{key}' unavailable: {cause}")


def validate_message(raw: str, max_length: int = MAX_MESSAGE_LENGTH) -> str:
    """Return the trimmed message, or raise BroadcastValidationError."""
    if not isinstance(raw, str):
        raise BroadcastValidationError(raw, "message must be a string")
    message = raw.strip()
    if not message:
        raise BroadcastValidationError(raw, "message is empty")
    if len(message) > max_length:
        raise BroadcastValidationError(
            raw, f"message is {len(message)} characters, limit is {max_length}"
        )
    return message


@dataclass(frozen=True)
class BroadcastRecord:
    """A shared position snapshot. Never mutated once written."""
    position: Position
    message: str
    created_at: datetime

    def __post_init__(self):
        if not isinstance(self.message, str) or not self.message.strip():
            raise BroadcastValidationError(self.message, "message is empty")
        if self.message != self.message.strip():
            raise BroadcastValidationError(self.message, "message is not trimmed")

    def to_wire(self) -> dict:
        return {
            "pos": position_to_wire(self.position),
            "message": self.message,
            "time": format_timestamp(self.created_at),
        }

    @classmethod
    def from_wire(cls, data: dict) -> "BroadcastRecord":
        return cls(
            position=position_from_wire(data["pos"]),
            message=data["message"],
            created_at=parse_timestamp(data["time"]),
        )


def position_to_wire(position: Position) -> dict:
    data = {}
    for attr, name in _POSITION_WIRE:
        value = getattr(position, attr)
        if value is not None:
            data[name] = value
    return data


def position_from_wire(data: dict) -> Position:
    kwargs = {attr: data[name] for attr, name in _POSITION_WIRE if name in data}
    return Position(**kwargs)


def format_timestamp(dt: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a 'Z' suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    utc = dt.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _utcnow():
    return datetime.now(timezone.utc)


class BroadcastLog:
    """
    Durable, append-only log of broadcasts.

    Usage:
        log = BroadcastLog(InMemoryKeyValueStore())
        record = log.append(position, "  gm  ")   # stored message is "gm"
        log.records()
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = BROADCAST_KEY,
        clock: Optional[Callable[[], datetime]] = None,
        max_length: int = MAX_MESSAGE_LENGTH,
    ):
        self.store = store
        self.key = key
        self.max_length = max_length
        self._clock = clock or _utcnow

    def append(self, position: Position, raw_message: str) -> BroadcastRecord:
        """Trim, validate and persist one broadcast. Returns the new record.

        Raises:
            BroadcastValidationError — message empty after trimming or too long;
                nothing is written
            BroadcastPersistenceError — the store could not be read or written
        """
        message = validate_message(raw_message, self.max_length)
        record = BroadcastRecord(
            position=position, message=message, created_at=self._clock(),
        )

        entries = self._read()
        entries.append(record.to_wire())
        self._write(entries)

        logger.info(
            "Broadcast #%d shared for %s (%d chars)",
            len(entries), position.symbol, len(message),
        )
        return record

    def records(self) -> List[BroadcastRecord]:
        """All persisted broadcasts, oldest first."""
        return [BroadcastRecord.from_wire(e) for e in self._read()]

    def __len__(self):
        return len(self._read())

    # ── Storage ──────────────────────────────────────────────────────

    def _read(self) -> list:
        try:
            raw = self.store.get(self.key)
        except StoreError as e:
            raise BroadcastPersistenceError(self.key, e) from e
        if raw is None or raw == "":
            return []
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as e:
            raise BroadcastPersistenceError(self.key, e) from e
        if not isinstance(entries, list):
            raise BroadcastPersistenceError(
                self.key, f"expected a JSON array, found {type(entries).__name__}"
            )
        return entries

    def _write(self, entries: list) -> None:
        try:
            self.store.set(self.key, json.dumps(entries))
        except StoreError as e:
            raise BroadcastPersistenceError(self.key, e) from e
