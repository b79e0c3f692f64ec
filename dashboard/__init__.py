"""
Dashboard engine: feed lifecycle, tab selection and row actions.

A UI shell drives Dashboard and renders the RenderedTable it returns.
"""

from dashboard.config import DashboardConfig
from dashboard.views import ViewController, VIEWS, TRADES, SPOT, CURVE, HOLDERS, TRADERS
from dashboard.app import Dashboard

__all__ = [
    "Dashboard", "DashboardConfig", "ViewController",
    "VIEWS", "TRADES", "SPOT", "CURVE", "HOLDERS", "TRADERS",
]
