"""
ViewController — which of the five tables is on screen.

Every view can be reached from every other; there is no terminal state.
Switching views never touches the feed.
"""

from reactive.observable import ObservableState
from reactive.state_machine import StateMachine, Transition


TRADES = "trades"
SPOT = "spot"
CURVE = "curve"
HOLDERS = "holders"
TRADERS = "traders"
VIEWS = (TRADES, SPOT, CURVE, HOLDERS, TRADERS)

VIEW_TITLES = {
    TRADES: "Trades",
    SPOT: "Spot Positions",
    CURVE: "Curve Positions",
    HOLDERS: "Holders",
    TRADERS: "Top Traders",
}


class ViewSelection(StateMachine):
    initial = TRADES
    transitions = [Transition(a, b) for a in VIEWS for b in VIEWS if a != b]


class ViewController:
    """Tab-selection state, observable via subscribe()."""

    def __init__(self, initial: str = TRADES):
        if initial not in VIEWS:
            raise ValueError(f"Unknown view '{initial}'. Views: {list(VIEWS)}")
        self._state = ObservableState(ViewSelection, initial)

    @property
    def current(self) -> str:
        return self._state()

    @property
    def title(self) -> str:
        return VIEW_TITLES[self.current]

    def select(self, view: str) -> bool:
        """Switch to view. Returns False if it was already selected."""
        if view not in VIEWS:
            raise ValueError(f"Unknown view '{view}'. Views: {list(VIEWS)}")
        if view == self.current:
            return False
        self._state.transition(view)
        return True

    def subscribe(self, callback):
        """callback(previous_view, new_view). Returns an unsubscribe fn."""
        return self._state.subscribe(callback)
