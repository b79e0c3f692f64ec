"""
Unit tests for the synthetic trade feed generator.
Runs on the manual scheduler, so no real timers or event loop are needed.
"""

import os
import random
import re
import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from feed.buffer import BoundedEventBuffer
from feed.config import FeedConfig, IDENTITY_LABELS
from feed.generator import EventGenerator
from feed.scheduler import ManualScheduler


NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
TX_REF = re.compile(r"^0x[0-9a-f]{64}$")
MARKET_CAP = re.compile(r"^\$\d{1,3}(,\d{3})+$")


@pytest.fixture
def sched():
    return ManualScheduler()


@pytest.fixture
def buf():
    return BoundedEventBuffer(50)


@pytest.fixture
def gen(buf, sched):
    return EventGenerator(buf, sched, rng=random.Random(42), clock=lambda: NOW)


# ── Configuration tests ─────────────────────────────────────────────────────

class TestConfig:
    def test_defaults(self):
        cfg = FeedConfig()
        assert cfg.capacity == 50
        assert (cfg.min_delay_ms, cfg.max_delay_ms) == (1000, 3000)
        assert cfg.label_probability == 0.17
        assert cfg.seed_count == 20

    def test_identity_labels_nonempty_strings(self):
        assert len(IDENTITY_LABELS) > 0
        for label in IDENTITY_LABELS:
            assert isinstance(label, str) and label

    @pytest.mark.parametrize("kwargs", [
        {"capacity": 0},
        {"min_delay_ms": 3000, "max_delay_ms": 1000},
        {"label_probability": 1.5},
        {"price_low": 2500, "price_high": 2400},
        {"max_quantity": 0},
        {"seed_count": -1},
        {"identity_labels": ()},
    ])
    def test_invalid_config_rejected(self, kwargs):
        with pytest.raises(ValueError):
            FeedConfig(**kwargs)

    def test_from_env(self):
        cfg = FeedConfig.from_env({
            "FEED_CAPACITY": "10",
            "FEED_LABEL_PROBABILITY": "0.5",
            "FEED_MIN_DELAY_MS": "",
        })
        assert cfg.capacity == 10
        assert cfg.label_probability == 0.5
        assert cfg.min_delay_ms == 1000

    def test_from_env_empty(self):
        assert FeedConfig.from_env({}) == FeedConfig()


# ── Event synthesis ─────────────────────────────────────────────────────────

class TestEventShape:
    @pytest.fixture(autouse=True)
    def emit_many(self, gen):
        self.events = [gen.emit_now() for _ in range(50)]

    def test_side_is_buy_or_sell(self):
        assert {e.side for e in self.events} <= {"buy", "sell"}

    def test_price_in_range_two_decimals(self):
        for e in self.events:
            assert Decimal("2400") <= e.price < Decimal("2500")
            assert e.price == e.price.quantize(Decimal("0.01"))

    def test_quantity_in_range(self):
        for e in self.events:
            assert Decimal("0") < e.quantity <= Decimal("10")

    def test_tx_ref_is_64_hex(self):
        for e in self.events:
            assert TX_REF.match(e.tx_ref), e.tx_ref

    def test_market_cap_formatted(self):
        for e in self.events:
            assert MARKET_CAP.match(e.market_cap), e.market_cap
            n = int(e.market_cap[1:].replace(",", ""))
            assert 1_000_000 <= n < 101_000_000

    def test_labels_come_from_pool(self):
        for e in self.events:
            assert e.identity_label is None or e.identity_label in IDENTITY_LABELS

    def test_timestamp_from_clock(self):
        assert all(e.timestamp == NOW for e in self.events)

    def test_events_are_frozen(self):
        with pytest.raises(Exception):
            self.events[0].price = Decimal("1")


class TestLabelProbability:
    def test_never_labelled_at_zero(self, buf, sched):
        gen = EventGenerator(buf, sched, FeedConfig(label_probability=0.0),
                             rng=random.Random(1))
        assert all(gen.emit_now().identity_label is None for _ in range(50))

    def test_always_labelled_at_one(self, buf, sched):
        gen = EventGenerator(buf, sched, FeedConfig(label_probability=1.0),
                             rng=random.Random(1))
        assert all(gen.emit_now().identity_label for _ in range(50))

    def test_default_rate_roughly_17_percent(self, sched):
        gen = EventGenerator(BoundedEventBuffer(5000), sched,
                             FeedConfig(capacity=5000), rng=random.Random(7))
        labelled = sum(1 for _ in range(4000) if gen.emit_now().identity_label)
        assert 0.13 < labelled / 4000 < 0.21


# ── Scheduling ──────────────────────────────────────────────────────────────

class TestScheduling:
    def test_start_schedules_single_pending(self, gen, sched):
        gen.start()
        assert gen.running
        assert sched.pending() == 1
        assert 1.0 <= sched.next_due() < 3.0

    def test_no_emission_before_first_delay(self, gen, sched, buf):
        gen.start()
        sched.advance(0.999)
        assert len(buf) == 0

    def test_emits_and_reschedules(self, gen, sched, buf):
        gen.start()
        for expected in range(1, 6):
            assert sched.run_next()
            assert len(buf) == expected
            assert sched.pending() == 1

    def test_delays_within_bounds(self, gen, sched):
        gen.start()
        previous = sched.time()
        for _ in range(30):
            due = sched.next_due()
            assert 1.0 <= due - previous < 3.0
            sched.run_next()
            previous = due

    def test_delay_draws_within_bounds(self, gen):
        for _ in range(500):
            assert 1.0 <= gen.next_delay() < 3.0

    def test_at_most_one_pending(self, gen, sched):
        gen.start()
        for _ in range(20):
            sched.run_next()
            assert sched.pending() <= 1

    def test_ids_strictly_increase(self, gen, sched, buf):
        gen.start()
        sched.advance(120)
        ids = [e.id for e in reversed(buf.snapshot())]
        assert ids == sorted(set(ids))
        assert gen.emitted >= 40

    def test_double_start_raises(self, gen):
        gen.start()
        with pytest.raises(RuntimeError, match="already running"):
            gen.start()


class TestStop:
    def test_stop_cancels_pending(self, gen, sched, buf):
        gen.start()
        sched.advance(10)
        count = len(buf)
        gen.stop()
        assert not gen.running
        assert sched.pending() == 0
        sched.advance(100)
        assert len(buf) == count

    def test_stop_without_start(self, gen):
        gen.stop()
        assert not gen.running

    def test_stop_twice(self, gen, sched):
        gen.start()
        gen.stop()
        gen.stop()
        assert sched.pending() == 0

    def test_restart_continues_ids(self, gen, sched, buf):
        gen.start()
        sched.run_next()
        gen.stop()
        gen.start()
        sched.run_next()
        ids = [e.id for e in buf.snapshot()]
        assert ids == [2, 1]


# ── Seeding ─────────────────────────────────────────────────────────────────

class TestSeed:
    def test_seed_fills_twenty(self, gen, buf):
        assert gen.seed() == 20
        assert len(buf) == 20

    def test_seed_newest_first(self, gen, buf):
        gen.seed()
        snap = buf.snapshot()
        assert [e.id for e in snap] == list(range(20, 0, -1))
        for earlier, later in zip(snap, snap[1:]):
            assert earlier.timestamp >= later.timestamp

    def test_seed_timestamps_within_window(self, gen, buf):
        gen.seed()
        for e in buf.snapshot():
            assert NOW - timedelta(seconds=60) <= e.timestamp <= NOW

    def test_live_ids_follow_seed(self, gen, sched, buf):
        gen.seed()
        gen.start()
        sched.run_next()
        assert buf.head.id == 21
        assert gen.emitted == 1

    def test_seed_custom_count(self, gen, buf):
        gen.seed(count=5, window_s=10)
        assert len(buf) == 5
