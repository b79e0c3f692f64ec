"""
Row entities rendered by the tables pipeline.

Values are kept as display-formatted strings ("+$122.50", "2.45 ETH"),
the way they arrive from the mock datasets; signed fields carry an
explicit leading "+" when positive.
"""

from dataclasses import dataclass
from typing import Optional


LONG = "Long"
SHORT = "Short"
CURVE = "Curve"
POSITION_KINDS = (LONG, SHORT, CURVE)


@dataclass(frozen=True)
class Position:
    """An open spot or curve position."""
    id: int
    symbol: str
    kind: str                 # "Long", "Short" or "Curve"
    size: str
    entry_price: str
    current_price: str
    pnl: str
    pnl_percent: str
    curve_name: Optional[str] = None

    def __post_init__(self):
        if self.kind not in POSITION_KINDS:
            raise ValueError(
                f"kind must be one of {POSITION_KINDS}, got {self.kind!r}"
            )


@dataclass(frozen=True)
class Holder:
    """A token holder row."""
    id: int
    address: str              # identity label or raw address
    holding: str
    avg_buy: str
    avg_sold: str
    position_size: str
    eth_balance: str
    pnl: str
    sold_percent: int

    def __post_init__(self):
        if not 0 <= self.sold_percent <= 100:
            raise ValueError(
                f"sold_percent must be within 0-100, got {self.sold_percent}"
            )


@dataclass(frozen=True)
class TopTrader:
    """A leaderboard row."""
    rank: int
    wallet: str               # identity label or raw address
    balance: str
    bought: str
    sold: str
    pnl: str
    pnl_percent: str
    remaining: str
