"""
Synthetic datasets for the position, holder and leaderboard tables.

Spot positions are fixed literals; holders and top traders are drawn
from a random.Random so a seeded session renders the same tables.
"""

import dataclasses
import random
from typing import Optional, Sequence, Tuple

from feed.config import IDENTITY_LABELS
from tables.models import Position, Holder, TopTrader, LONG, SHORT, CURVE


SPOT_POSITIONS = (
    Position(1, "ETH/USDT", LONG, "2.45 ETH", "$2,400.00", "$2,450.00",
             "+$122.50", "+2.08%"),
    Position(2, "BTC/USDT", SHORT, "0.15 BTC", "$43,200.00", "$43,000.00",
             "+$30.00", "+0.46%"),
    Position(3, "UNI/USDT", LONG, "150 UNI", "$6.50", "$7.85",
             "+$202.50", "+20.77%"),
)

CURVE_NAMES = ("Uniswap V3", "Curve.fi", "Balancer", "SushiSwap", "PancakeSwap")


def curve_positions(spot: Sequence[Position] = SPOT_POSITIONS,
                    names: Sequence[str] = CURVE_NAMES) -> Tuple[Position, ...]:
    """Curve variants of the spot positions, curve names assigned round-robin."""
    return tuple(
        dataclasses.replace(p, kind=CURVE, curve_name=names[i % len(names)])
        for i, p in enumerate(spot)
    )


def _signed(magnitude: float, positive: bool, fmt: str) -> str:
    return ("+" if positive else "-") + fmt.format(magnitude)


def make_holders(rng: Optional[random.Random] = None, count: int = 10,
                 labels: Sequence[str] = IDENTITY_LABELS) -> Tuple[Holder, ...]:
    """Holder rows. Every third row (starting with the first) is under water."""
    rng = rng or random.Random()
    rows = []
    for i in range(count):
        sold = rng.randrange(100)
        rows.append(Holder(
            id=i + 1,
            address=rng.choice(labels) if labels else f"trader{i}.fluxpool.eth",
            holding=f"{100 - sold} ETH",
            avg_buy=f"${2000 + rng.random() * 1000:.2f}",
            avg_sold=f"${2000 + rng.random() * 1000:.2f}",
            position_size=f"{rng.random() * 100:.2f} ETH",
            eth_balance=f"{rng.random() * 100:.2f}",
            pnl=_signed(rng.random() * 10000, i % 3 != 0, "${:.2f}"),
            sold_percent=sold,
        ))
    return tuple(rows)


def make_top_traders(rng: Optional[random.Random] = None, count: int = 20,
                     labels: Sequence[str] = IDENTITY_LABELS) -> Tuple[TopTrader, ...]:
    """Leaderboard rows ranked 1..count. The top five are always in profit."""
    rng = rng or random.Random()
    rows = []
    for i in range(count):
        if i < 5:
            positive = True
            pnl_mag = rng.random() * 10000 + 1000
            pct_mag = rng.random() * 30 + 10
        else:
            positive = rng.random() > 0.2
            pnl_mag = rng.random() * 10000
            pct_mag = rng.random() * 30
        rows.append(TopTrader(
            rank=i + 1,
            wallet=labels[i % len(labels)] if labels else f"trader{i}.fluxpool.eth",
            balance=f"{rng.random() * 500:.2f}",
            bought=(f"${rng.random() * 10000:.2f}K "
                    f"({rng.random() * 1000:.1f}M / {rng.randrange(10) + 1})"),
            sold=(f"${rng.random() * 20000:.2f}K "
                  f"({rng.random() * 1000:.1f}M / {rng.randrange(100) + 1})"),
            pnl=_signed(pnl_mag, positive, "${:.2f}"),
            pnl_percent=_signed(pct_mag, positive, "{:.2f}%"),
            remaining=f"${rng.random() * 5000:.1f} ({rng.randrange(100)}%)",
        ))
    return tuple(rows)
