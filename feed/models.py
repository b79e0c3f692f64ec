"""
Feed domain types.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


BUY = "buy"
SELL = "sell"
SIDES = (BUY, SELL)


@dataclass(frozen=True)
class TradeEvent:
    """A single synthetic trade. Immutable once created."""
    id: int
    timestamp: datetime
    side: str                 # "buy" or "sell"
    quantity: Decimal         # ETH, 3 dp
    price: Decimal            # USD, 2 dp
    market_cap: str           # pre-formatted, e.g. "$12,345,678"
    tx_ref: str               # "0x" + 64 hex digits
    identity_label: Optional[str] = None

    def __post_init__(self):
        if self.side not in SIDES:
            raise ValueError(f"side must be one of {SIDES}, got {self.side!r}")
