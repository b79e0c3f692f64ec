"""
Tunables for the synthetic trade feed.

The delay bounds and label probability have no deeper meaning than
"looks like a busy market"; they are kept configurable instead of baked
into the generator.
"""

import os
from dataclasses import dataclass, field
from typing import Tuple


# Humorous placeholder identities attached to a fraction of trades
IDENTITY_LABELS = (
    "rugpullmaster.fluxpool.eth", "rektwizard.fluxpool.eth",
    "notyourkeys.fluxpool.eth", "vitalikbuterinbutnot.fluxpool.eth",
    "sushiswapfan.fluxpool.eth", "defi_dj.fluxpool.eth",
    "gwei_boi.fluxpool.eth", "hodlmybeer.fluxpool.eth",
    "ape4life.fluxpool.eth", "fomo.soon.fluxpool.eth",
    "paperhands.fluxpool.eth", "diamondhandz.fluxpool.eth",
    "gasguzzler.fluxpool.eth", "ponziplay.fluxpool.eth",
    "exitliquidity.fluxpool.eth", "safemoonbag.fluxpool.eth",
    "yolotrader.fluxpool.eth", "gmgn.fluxpool.eth",
    "to_the_moon.fluxpool.eth", "rektagain.fluxpool.eth",
    "whalealert.fluxpool.eth",
)


@dataclass(frozen=True)
class FeedConfig:
    """Parameters for EventGenerator and its BoundedEventBuffer."""
    capacity: int = 50
    min_delay_ms: int = 1000
    max_delay_ms: int = 3000
    label_probability: float = 0.17
    price_low: float = 2400.0
    price_high: float = 2500.0
    max_quantity: float = 10.0
    seed_count: int = 20
    seed_window_s: int = 60
    identity_labels: Tuple[str, ...] = field(default=IDENTITY_LABELS)

    def __post_init__(self):
        if self.capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {self.capacity}")
        if not 0 <= self.min_delay_ms < self.max_delay_ms:
            raise ValueError(
                f"delay bounds must satisfy 0 <= min < max, got "
                f"[{self.min_delay_ms}, {self.max_delay_ms})"
            )
        if not 0.0 <= self.label_probability <= 1.0:
            raise ValueError(
                f"label_probability must be in [0, 1], got {self.label_probability}"
            )
        if not self.price_low < self.price_high:
            raise ValueError(
                f"price range must satisfy low < high, got "
                f"[{self.price_low}, {self.price_high})"
            )
        if self.max_quantity <= 0:
            raise ValueError(f"max_quantity must be > 0, got {self.max_quantity}")
        if self.seed_count < 0 or self.seed_window_s < 0:
            raise ValueError("seed_count and seed_window_s must be >= 0")
        if self.label_probability > 0 and not self.identity_labels:
            raise ValueError("identity_labels is empty but label_probability > 0")

    @classmethod
    def from_env(cls, environ=None) -> "FeedConfig":
        """Build a config from FEED_* environment variables.

        Unset variables fall back to the dataclass defaults.
        """
        env = os.environ if environ is None else environ
        kwargs = {}
        casts = {
            "capacity": int,
            "min_delay_ms": int,
            "max_delay_ms": int,
            "label_probability": float,
            "price_low": float,
            "price_high": float,
            "max_quantity": float,
            "seed_count": int,
            "seed_window_s": int,
        }
        for name, cast in casts.items():
            raw = env.get(f"FEED_{name.upper()}")
            if raw is not None and raw != "":
                kwargs[name] = cast(raw)
        return cls(**kwargs)
