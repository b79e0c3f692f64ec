"""
Column descriptors and the column-set registry.

A ColumnDescriptor maps a row to one displayable cell. Column sets are
plain tuples of descriptors, one per row-entity kind; variants are built
with extend()/prepend(), which share descriptors by identity and never
touch the base tuple.

ColumnRegistry is the catalog of named column sets that views render.
"""

import dataclasses
import operator
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Tuple

from tables.primitives import CellValue, sort_magnitude


class RegistryError(Exception):
    """Raised when a column set registration or lookup fails."""


@dataclasses.dataclass(frozen=True, eq=False)
class ColumnDescriptor:
    """Declarative mapping from a row to one cell.

    render(row) must be pure; it may return a CellValue or any value,
    which cell() wraps as text. A timed column's render takes
    (row, now) instead, so the reference time is an explicit input.

    sort_value(row) supplies the value sorted on. Without one, rows sort
    by the rendered text with leading numbers compared by magnitude.
    """
    key: str
    header: str
    render: Callable[..., Any]
    sortable: bool = True
    sort_value: Optional[Callable[[Any], Any]] = None
    timed: bool = False

    def cell(self, row, now: Optional[datetime] = None) -> CellValue:
        value = self.render(row, now) if self.timed else self.render(row)
        if isinstance(value, CellValue):
            return value
        return CellValue(text="" if value is None else str(value))

    def sort_key(self, row, now: Optional[datetime] = None):
        if self.sort_value is not None:
            return sort_magnitude(self.sort_value(row))
        return sort_magnitude(self.cell(row, now).text)

    def __repr__(self):
        return f"ColumnDescriptor({self.key!r}, {self.header!r})"


def field_column(key: str, header: str, attr: str = None, fmt: str = None,
                 sortable: bool = True) -> ColumnDescriptor:
    """Descriptor that reads one attribute, optionally through a format string.

    Sorting uses the attribute's raw value.
    """
    attr = attr or key

    def render(row):
        value = getattr(row, attr)
        if fmt is not None:
            return fmt.format(value)
        return value

    return ColumnDescriptor(
        key=key, header=header, render=render, sortable=sortable,
        sort_value=operator.attrgetter(attr),
    )


def action_column(key: str, label: str, header: str = "") -> ColumnDescriptor:
    """Non-sortable button column. The cell text is the button label."""
    return ColumnDescriptor(
        key=key, header=header,
        render=lambda row: CellValue(text=label),
        sortable=False,
    )


ColumnSet = Tuple[ColumnDescriptor, ...]


def extend(base: Iterable[ColumnDescriptor],
           extra: Iterable[ColumnDescriptor]) -> ColumnSet:
    """New column set: base followed by extra. base is left untouched."""
    return tuple(base) + tuple(extra)


def prepend(extra: Iterable[ColumnDescriptor],
            base: Iterable[ColumnDescriptor]) -> ColumnSet:
    """New column set: extra followed by base. base is left untouched."""
    return tuple(extra) + tuple(base)


class ColumnRegistry:
    """
    Catalog of named column sets.

    Each name maps to an immutable tuple of descriptors. Keys must be
    unique within a set; the same descriptor object may appear in many sets.
    """

    def __init__(self):
        self._sets: dict[str, ColumnSet] = {}

    def register(self, name: str, columns: Iterable[ColumnDescriptor]) -> ColumnSet:
        """Register a column set under name and return the stored tuple.

        Raises RegistryError if name is taken, the set is empty, or a key
        repeats within the set.
        """
        if name in self._sets:
            raise RegistryError(f"Column set '{name}' is already registered")
        cols = tuple(columns)
        if not cols:
            raise RegistryError(f"Column set '{name}' is empty")
        seen = set()
        for col in cols:
            if not isinstance(col, ColumnDescriptor):
                raise RegistryError(
                    f"Column set '{name}': {col!r} is not a ColumnDescriptor"
                )
            if col.key in seen:
                raise RegistryError(
                    f"Column set '{name}': duplicate column key '{col.key}'"
                )
            seen.add(col.key)
        self._sets[name] = cols
        return cols

    def get(self, name: str) -> ColumnSet:
        """Raises RegistryError if name is not registered."""
        if name not in self._sets:
            raise RegistryError(f"Column set '{name}' is not registered")
        return self._sets[name]

    def has(self, name: str) -> bool:
        return name in self._sets

    def names(self) -> list:
        return list(self._sets)

    def keys_for(self, name: str) -> list:
        """Column keys of a registered set, in display order."""
        return [c.key for c in self.get(name)]

    def sets_with(self, key: str) -> list:
        """Names of every set containing a column with this key."""
        return [n for n, cols in self._sets.items() if any(c.key == key for c in cols)]
