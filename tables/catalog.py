"""
Column catalog — one descriptor table per row-entity kind.

Exports the column sets and REGISTRY, the global ColumnRegistry populated
with every view's columns. Variants are composed, never subclassed: the
curve table is the position table with a curve-name column in front, and
the action tables append close/share buttons.
"""

from tables.columns import (
    ColumnDescriptor, ColumnRegistry, field_column, action_column,
    extend, prepend,
)
from tables.primitives import (
    CellValue, MUTED, identity_cell, identity_or_fallback, short_ref,
    signed_cell, signed_tone, time_ago,
)


# ── Trades ────────────────────────────────────────────────────────

def _side_cell(event):
    return CellValue(text=event.side.upper(), tone=event.side)


TRADE_COLUMNS = (
    ColumnDescriptor(
        "timestamp", "Time", lambda e, now: time_ago(e.timestamp, now),
        sort_value=lambda e: e.timestamp, timed=True,
    ),
    ColumnDescriptor("side", "Type", _side_cell),
    field_column("quantity", "Amount (ETH)"),
    field_column("price", "Price (USD)", fmt="${}"),
    field_column("market_cap", "Market Cap"),
    ColumnDescriptor(
        "identity", "User Address",
        lambda e: identity_or_fallback(e.identity_label, e.tx_ref),
    ),
    ColumnDescriptor(
        "tx_ref", "Transaction Hash",
        lambda e: CellValue(text=short_ref(e.tx_ref)),
    ),
)

# ── Positions ─────────────────────────────────────────────────────

POSITION_COLUMNS = (
    field_column("symbol", "Symbol"),
    field_column("kind", "Type"),
    field_column("size", "Size"),
    field_column("entry_price", "Entry"),
    field_column("current_price", "Current"),
    ColumnDescriptor("pnl", "PnL", lambda p: signed_cell(p.pnl)),
    field_column("pnl_percent", "%"),
)

CURVE_NAME_COLUMN = ColumnDescriptor(
    "curve_name", "Curve", lambda p: p.curve_name or "",
)

CURVE_POSITION_COLUMNS = prepend([CURVE_NAME_COLUMN], POSITION_COLUMNS)

CLOSE_COLUMN = action_column("close", "Close")
SHARE_COLUMN = action_column("share", "Share")

# ── Holders ───────────────────────────────────────────────────────

def _sold_cell(holder):
    # bar fill is the sold share; the label beside it is the position size
    return CellValue(
        text=holder.position_size,
        tone=signed_tone(holder.pnl),
        progress=holder.sold_percent,
    )


HOLDER_COLUMNS = (
    ColumnDescriptor("address", "Address", lambda h: identity_cell(h.address)),
    field_column("avg_buy", "Avg Buy"),
    field_column("avg_sold", "Avg Sold"),
    field_column("position_size", "Position Size"),
    field_column("eth_balance", "ETH Balance"),
    ColumnDescriptor("pnl", "PnL", lambda h: signed_cell(h.pnl)),
    ColumnDescriptor(
        "sold_percent", "Sold %", _sold_cell,
        sort_value=lambda h: h.sold_percent,
    ),
)

# ── Top traders ───────────────────────────────────────────────────

TOP_TRADER_COLUMNS = (
    field_column("rank", "#"),
    ColumnDescriptor("wallet", "Wallet", lambda t: identity_cell(t.wallet)),
    field_column("balance", "ETH Balance"),
    field_column("bought", "Bought (Avg Buy)"),
    field_column("sold", "Sold (Avg Sell)"),
    ColumnDescriptor("pnl", "PnL", lambda t: signed_cell(t.pnl)),
    ColumnDescriptor("pnl_percent", "%", lambda t: signed_cell(t.pnl_percent)),
    ColumnDescriptor(
        "remaining", "Remaining",
        lambda t: CellValue(text=t.remaining, tone=MUTED),
    ),
)

# ── Registry ──────────────────────────────────────────────────────

REGISTRY = ColumnRegistry()
REGISTRY.register("trades", TRADE_COLUMNS)
REGISTRY.register("spot", POSITION_COLUMNS)
REGISTRY.register("curve", CURVE_POSITION_COLUMNS)
REGISTRY.register("holders", HOLDER_COLUMNS)
REGISTRY.register("traders", TOP_TRADER_COLUMNS)
REGISTRY.register("spot_actions", extend(POSITION_COLUMNS, [CLOSE_COLUMN, SHARE_COLUMN]))
REGISTRY.register("curve_actions", extend(CURVE_POSITION_COLUMNS, [CLOSE_COLUMN, SHARE_COLUMN]))
