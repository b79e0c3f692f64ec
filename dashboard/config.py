"""
Dashboard configuration.
"""

import os
from dataclasses import dataclass, field

from broadcast.log import BROADCAST_KEY, MAX_MESSAGE_LENGTH
from broadcast.dialog import AUTO_CLOSE_DELAY
from feed.config import FeedConfig


@dataclass(frozen=True)
class DashboardConfig:
    """Top-level settings; feed tunables live in FeedConfig."""
    feed: FeedConfig = field(default_factory=FeedConfig)
    broadcast_key: str = BROADCAST_KEY
    auto_close_delay: float = AUTO_CLOSE_DELAY
    max_message_length: int = MAX_MESSAGE_LENGTH
    holder_count: int = 10
    trader_count: int = 20
    seed_feed: bool = True

    def __post_init__(self):
        if not self.broadcast_key:
            raise ValueError("broadcast_key must not be empty")
        if self.auto_close_delay < 0:
            raise ValueError(f"auto_close_delay must be >= 0, got {self.auto_close_delay}")
        if self.max_message_length < 1:
            raise ValueError(
                f"max_message_length must be >= 1, got {self.max_message_length}"
            )

    @classmethod
    def from_env(cls, environ=None) -> "DashboardConfig":
        """Build from DASHBOARD_* and FEED_* environment variables."""
        env = os.environ if environ is None else environ
        kwargs = {"feed": FeedConfig.from_env(env)}
        if env.get("DASHBOARD_BROADCAST_KEY"):
            kwargs["broadcast_key"] = env["DASHBOARD_BROADCAST_KEY"]
        if env.get("DASHBOARD_AUTO_CLOSE_DELAY"):
            kwargs["auto_close_delay"] = float(env["DASHBOARD_AUTO_CLOSE_DELAY"])
        if env.get("DASHBOARD_SEED_FEED"):
            kwargs["seed_feed"] = env["DASHBOARD_SEED_FEED"].lower() not in ("0", "false", "no")
        return cls(**kwargs)
