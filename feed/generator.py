"""
Synthetic trade feed.

Generates plausible trade events without any backing exchange and pushes
them into a BoundedEventBuffer on a randomized schedule.

The schedule is a chain of single-shot timers: each emission draws a
fresh delay and schedules the next one, so jitter never accumulates and
at most one emission is pending at any time. stop() cancels that single
pending task through its handle.
"""

import logging
import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_DOWN, ROUND_UP
from typing import Callable, Optional

from feed.buffer import BoundedEventBuffer
from feed.config import FeedConfig
from feed.models import TradeEvent, BUY, SELL
from feed.scheduler import Scheduler, ScheduledTask


logger = logging.getLogger(__name__)

TX_REF_HEX_DIGITS = 64
MARKET_CAP_FLOOR = 1_000_000
MARKET_CAP_SPAN = 100_000_000

_CENT = Decimal("0.01")
_MILLI = Decimal("0.001")


def _utcnow():
    return datetime.now(timezone.utc)


class EventGenerator:
    """
    Self-rescheduling producer of TradeEvents.

    Usage:
        buffer = BoundedEventBuffer(50)
        gen = EventGenerator(buffer, ManualScheduler())
        gen.seed()
        gen.start()
        ...
        gen.stop()

    Args:
        buffer:    destination buffer; the generator is its only writer
        scheduler: source of cancellable single-shot timers
        config:    FeedConfig (defaults apply if omitted)
        rng:       random.Random instance, for reproducible sessions
        clock:     callable returning an aware datetime for event timestamps
    """

    def __init__(
        self,
        buffer: BoundedEventBuffer,
        scheduler: Scheduler,
        config: Optional[FeedConfig] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.buffer = buffer
        self.scheduler = scheduler
        self.config = config or FeedConfig()
        self._rng = rng or random.Random()
        self._clock = clock or _utcnow
        self._next_id = 1
        self._pending: Optional[ScheduledTask] = None
        self._running = False
        self.emitted = 0

    # ── Lifecycle ────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._running

    @property
    def next_id(self) -> int:
        """The id the next synthesized event will receive."""
        return self._next_id

    def start(self) -> None:
        """Schedule the first emission after a random delay.

        Raises RuntimeError if the generator is already running.
        """
        if self._running:
            raise RuntimeError("EventGenerator is already running")
        self._running = True
        self._schedule_next()
        logger.info("Feed generator started (next id %d)", self._next_id)

    def stop(self) -> None:
        """Cancel the pending emission. No event is pushed after this returns."""
        was_running = self._running
        self._running = False
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        if was_running:
            logger.info("Feed generator stopped after %d emissions", self.emitted)

    def seed(self, count: Optional[int] = None, window_s: Optional[int] = None) -> int:
        """Pre-populate the buffer with backdated events.

        Timestamps fall within the last window_s seconds. Events are built
        oldest first and pushed in that order, so the buffer ends up
        newest-first with strictly increasing ids. Returns the number pushed.
        """
        count = self.config.seed_count if count is None else count
        window_s = self.config.seed_window_s if window_s is None else window_s
        now = self._clock()
        offsets = sorted(
            (self._rng.random() * window_s for _ in range(count)), reverse=True
        )
        for offset in offsets:
            self.buffer.push(self._make_event(now - timedelta(seconds=offset)))
        logger.info("Seeded feed buffer with %d backdated events", count)
        return count

    # ── Emission ─────────────────────────────────────────────────────

    def emit_now(self) -> TradeEvent:
        """Synthesize one event stamped now and push it into the buffer."""
        event = self._make_event(self._clock())
        self.buffer.push(event)
        self.emitted += 1
        logger.debug(
            "Emitted trade %d %s %s @ %s", event.id, event.side,
            event.quantity, event.price,
        )
        return event

    def next_delay(self) -> float:
        """Draw a delay in seconds from [min_delay_ms, max_delay_ms)."""
        lo, hi = self.config.min_delay_ms, self.config.max_delay_ms
        return (lo + self._rng.random() * (hi - lo)) / 1000.0

    def _tick(self):
        self._pending = None
        if not self._running:
            return
        self.emit_now()
        self._schedule_next()

    def _schedule_next(self):
        self._pending = self.scheduler.call_later(self.next_delay(), self._tick)

    # ── Synthesis ────────────────────────────────────────────────────

    def _make_event(self, timestamp: datetime) -> TradeEvent:
        rng = self._rng
        cfg = self.config
        event_id = self._next_id
        self._next_id += 1

        label = None
        if rng.random() < cfg.label_probability:
            label = rng.choice(cfg.identity_labels)

        return TradeEvent(
            id=event_id,
            timestamp=timestamp,
            side=BUY if rng.random() < 0.5 else SELL,
            quantity=self._random_quantity(),
            price=self._random_price(),
            market_cap=self._random_market_cap(),
            tx_ref=self._random_tx_ref(),
            identity_label=label,
        )

    def _random_price(self) -> Decimal:
        lo, hi = self.config.price_low, self.config.price_high
        raw = Decimal(repr(lo + self._rng.random() * (hi - lo)))
        return raw.quantize(_CENT, rounding=ROUND_DOWN)

    def _random_quantity(self) -> Decimal:
        # 1 - random() lies in (0, 1], which keeps zero out of the range
        raw = Decimal(repr(self.config.max_quantity * (1.0 - self._rng.random())))
        return raw.quantize(_MILLI, rounding=ROUND_UP)

    def _random_market_cap(self) -> str:
        n = MARKET_CAP_FLOOR + self._rng.randrange(MARKET_CAP_SPAN)
        return f"${n:,}"

    def _random_tx_ref(self) -> str:
        return "0x" + "".join(
            self._rng.choice("0123456789abcdef") for _ in range(TX_REF_HEX_DIGITS)
        )
