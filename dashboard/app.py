"""
Dashboard — wires the feed, the tables pipeline and the broadcast dialog.

The feed (generator + buffer) exists only while activated. Tearing it
down stops the generator, which cancels its pending timer, before the
buffer is cleared and dropped. View switches only change which table
render_active() produces.
"""

import logging
import random
from typing import Optional

from broadcast.dialog import BroadcastDialog
from broadcast.log import BroadcastLog
from dashboard.config import DashboardConfig
from dashboard.views import ViewController, TRADES, SPOT, CURVE, HOLDERS, TRADERS
from feed.buffer import BoundedEventBuffer
from feed.generator import EventGenerator
from feed.scheduler import Scheduler
from store.kv import KeyValueStore, InMemoryKeyValueStore
from tables.catalog import REGISTRY
from tables.composer import TableComposer, RenderedTable
from tables.mock_data import SPOT_POSITIONS, curve_positions, make_holders, make_top_traders
from tables.models import Position


logger = logging.getLogger(__name__)

# View → registered column set
VIEW_COLUMNS = {
    TRADES: "trades",
    SPOT: "spot_actions",
    CURVE: "curve_actions",
    HOLDERS: "holders",
    TRADERS: "traders",
}


class Dashboard:
    """
    Engine behind the market dashboard.

    Usage:
        sched = ManualScheduler()
        dash = Dashboard(sched, store=InMemoryKeyValueStore(), rng=random.Random(7))
        dash.activate_feed()
        sched.advance(10)
        table = dash.render_active()
        dash.views.select("spot")
        dash.share(SPOT, position_id=1)
        dash.dialog.edit_message("gm")
        dash.dialog.submit()
        dash.deactivate_feed()
    """

    def __init__(
        self,
        scheduler: Scheduler,
        store: Optional[KeyValueStore] = None,
        config: Optional[DashboardConfig] = None,
        rng: Optional[random.Random] = None,
        clock=None,
    ):
        self.config = config or DashboardConfig()
        self.scheduler = scheduler
        self.store = store if store is not None else InMemoryKeyValueStore()
        self._rng = rng or random.Random()
        self._clock = clock

        self.views = ViewController()
        self.composer = TableComposer(clock=clock)
        self.log = BroadcastLog(
            self.store,
            key=self.config.broadcast_key,
            clock=clock,
            max_length=self.config.max_message_length,
        )
        self.dialog = BroadcastDialog(
            self.log, scheduler,
            auto_close_delay=self.config.auto_close_delay,
            max_length=self.config.max_message_length,
        )

        self.spot_positions = SPOT_POSITIONS
        self.curve_positions = curve_positions(SPOT_POSITIONS)
        self.holders = make_holders(self._rng, self.config.holder_count)
        self.top_traders = make_top_traders(self._rng, self.config.trader_count)

        self.buffer: Optional[BoundedEventBuffer] = None
        self.generator: Optional[EventGenerator] = None

    # ── Feed lifecycle ───────────────────────────────────────────────

    @property
    def feed_active(self) -> bool:
        return self.generator is not None

    def activate_feed(self) -> None:
        """Create the buffer and generator, seed, and start emitting. Idempotent."""
        if self.feed_active:
            return
        self.buffer = BoundedEventBuffer(self.config.feed.capacity)
        self.generator = EventGenerator(
            self.buffer, self.scheduler,
            config=self.config.feed, rng=self._rng, clock=self._clock,
        )
        if self.config.seed_feed:
            self.generator.seed()
        self.generator.start()
        logger.info("Feed activated")

    def deactivate_feed(self) -> None:
        """Stop the generator (cancelling its timer), then discard the buffer."""
        if not self.feed_active:
            return
        self.generator.stop()
        self.buffer.clear()
        self.generator = None
        self.buffer = None
        logger.info("Feed deactivated")

    # ── Tables ───────────────────────────────────────────────────────

    def dataset(self, view: str):
        if view == TRADES:
            return self.buffer.snapshot() if self.buffer is not None else ()
        if view == SPOT:
            return self.spot_positions
        if view == CURVE:
            return self.curve_positions
        if view == HOLDERS:
            return self.holders
        if view == TRADERS:
            return self.top_traders
        raise ValueError(f"Unknown view '{view}'")

    def columns(self, view: str):
        if view not in VIEW_COLUMNS:
            raise ValueError(f"Unknown view '{view}'")
        return REGISTRY.get(VIEW_COLUMNS[view])

    def render(self, view: str, sort_key: str = None, descending: bool = False) -> RenderedTable:
        return self.composer.render(
            self.dataset(view), self.columns(view),
            sort_key=sort_key, descending=descending,
        )

    def render_active(self, sort_key: str = None, descending: bool = False) -> RenderedTable:
        """Render whichever view the ViewController has selected."""
        return self.render(self.views.current, sort_key=sort_key, descending=descending)

    # ── Row actions ──────────────────────────────────────────────────

    def position(self, view: str, position_id: int) -> Position:
        """Look up a position row by id in the spot or curve table."""
        if view not in (SPOT, CURVE):
            raise ValueError(f"View '{view}' has no positions")
        for p in self.dataset(view):
            if p.id == position_id:
                return p
        raise KeyError(f"No position {position_id} in view '{view}'")

    def share(self, view: str, position_id: int) -> Position:
        """Open the broadcast dialog on a position row (the share action)."""
        position = self.position(view, position_id)
        self.dialog.open_with_position(position)
        return position

    def shutdown(self) -> None:
        """Tear everything down: dialog timers, feed, store connection."""
        self.dialog.close()
        self.deactivate_feed()
        self.store.close()
