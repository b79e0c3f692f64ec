"""
Pure rendering primitives shared by every column catalog.

Nothing here touches state outside its arguments; the same input always
renders the same CellValue (time_ago takes `now` as an argument for that).
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional


POSITIVE = "positive"
NEGATIVE = "negative"
MUTED = "muted"

PROFILE_PREFIX = "/profile/"


@dataclass(frozen=True)
class CellValue:
    """
    A rendered cell.

    text:     what to display
    tone:     optional styling hint (positive, negative, buy, sell, muted)
    href:     navigable reference, if the cell links somewhere
    progress: 0-100 fill for progress-bar cells
    """
    text: str
    tone: Optional[str] = None
    href: Optional[str] = None
    progress: Optional[int] = None


def is_positive(value) -> bool:
    """A formatted number is positive iff it starts with '+'.

    "+$1.00" -> True, "-$1.00" -> False, "$1.00" -> False.
    """
    return isinstance(value, str) and value.startswith("+")


def signed_tone(value) -> str:
    return POSITIVE if is_positive(value) else NEGATIVE


def signed_cell(value: str) -> CellValue:
    """PnL-like cell coloured by its sign."""
    return CellValue(text=value, tone=signed_tone(value))


def short_ref(ref: str) -> str:
    """Abbreviate a reference as first 8 chars + '...' + last 6 chars."""
    return f"{ref[:8]}...{ref[-6:]}"


def profile_href(identity: str) -> str:
    return f"{PROFILE_PREFIX}{identity}"


def identity_cell(identity: str) -> CellValue:
    """A link to an identity's profile."""
    return CellValue(text=identity, href=profile_href(identity))


def identity_or_fallback(label: Optional[str], ref: str) -> CellValue:
    """Link to the label if present, else a short token derived from ref."""
    if label:
        return identity_cell(label)
    return CellValue(text=short_ref(ref), tone=MUTED)


def time_ago(timestamp: datetime, now: datetime) -> str:
    """Relative age: 'Ns ago' under a minute, 'Nm ago' under an hour, else 'Nh ago'.

    Each tier truncates. Timestamps in the future read as '0s ago'.
    Naive datetimes are taken to be UTC.
    """
    diff = int((_as_utc(now) - _as_utc(timestamp)).total_seconds())
    diff = max(diff, 0)
    if diff < 60:
        return f"{diff}s ago"
    if diff < 3600:
        return f"{diff // 60}m ago"
    return f"{diff // 3600}h ago"


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


_LEADING_NUMBER = re.compile(r"^([+-]?)\$?(\d[\d,]*(?:\.\d+)?)")


def sort_magnitude(value):
    """Sort key that orders formatted numbers by value.

    Numbers, Decimals and datetimes sort as themselves. Strings that start
    with a number ("+$122.50", "-$30.00", "2.45 ETH", "+2.08%",
    "$2,400.00") sort by that number; any other text sorts after every
    number, alphabetically.
    """
    if isinstance(value, (int, float, Decimal, datetime)) and not isinstance(value, bool):
        return (0, value)
    text = "" if value is None else str(value).strip()
    m = _LEADING_NUMBER.match(text)
    if m is None:
        return (1, text)
    number = Decimal(m.group(2).replace(",", ""))
    return (0, -number if m.group(1) == "-" else number)
