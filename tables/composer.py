"""
TableComposer — renders rows through a column set.

Rendering is memoized per column set: if the same column tuple is
rendered again over the same row tuple, the previous RenderedTable is
returned. Because composed column sets share descriptors instead of
copying base lists, re-rendering one view never evicts another view's
cached table.

Timed columns ("45s ago") depend on the reference time, so they are kept
out of the memo: when only `now` moved, the cached row order and every
other cell are reused and just the timed cells are rendered again.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence, Tuple

from tables.columns import ColumnDescriptor
from tables.primitives import CellValue


logger = logging.getLogger(__name__)


def _utcnow():
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RenderedTable:
    """Headers plus one tuple of cells per row, in display order."""
    keys: Tuple[str, ...]
    headers: Tuple[str, ...]
    rows: Tuple[Tuple[CellValue, ...], ...]

    def __len__(self):
        return len(self.rows)

    def column(self, key: str) -> Tuple[CellValue, ...]:
        """All cells of one column, top to bottom."""
        idx = self.keys.index(key)
        return tuple(row[idx] for row in self.rows)

    def texts(self) -> list:
        """Plain-text grid, handy for logging and tests."""
        return [[c.text for c in row] for row in self.rows]


@dataclass
class _Memo:
    columns: Sequence[ColumnDescriptor]
    rows: Sequence
    sort: tuple
    ordered: tuple
    now: datetime
    table: RenderedTable


class TableComposer:
    """
    Generic renderer shared by all five row-entity kinds.

    Usage:
        composer = TableComposer(clock=lambda: datetime.now(timezone.utc))
        table = composer.render(buffer.snapshot(), REGISTRY.get("trades"))
        table = composer.render(positions, cols, sort_key="pnl", descending=True)

    Args:
        clock: callable returning the aware datetime timed columns are
               rendered against
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or _utcnow
        self._cache = {}       # id(columns) → _Memo
        self.renders = 0       # full renders
        self.refreshes = 0     # cached tables whose timed cells were re-rendered

    def render(
        self,
        rows: Sequence,
        columns: Sequence[ColumnDescriptor],
        sort_key: Optional[str] = None,
        descending: bool = False,
        now: Optional[datetime] = None,
    ) -> RenderedTable:
        """Render rows through columns.

        sort_key, if given, must name a sortable column; rows are ordered
        by that column's sort key. Raises ValueError otherwise. now
        defaults to the composer's clock.
        """
        now = self._clock() if now is None else now
        sort = (sort_key, descending)
        timed = [i for i, col in enumerate(columns) if col.timed]

        memo = self._cache.get(id(columns))
        if (memo is not None and memo.columns is columns
                and memo.rows is rows and memo.sort == sort):
            if not timed or memo.now == now:
                return memo.table
            return self._refresh(memo, timed, now)

        ordered = tuple(rows)
        if sort_key is not None:
            col = columns[self._sort_index(columns, sort_key)]
            ordered = tuple(sorted(
                ordered, key=lambda row: col.sort_key(row, now), reverse=descending,
            ))

        cells = tuple(tuple(col.cell(row, now) for col in columns) for row in ordered)
        table = RenderedTable(
            keys=tuple(c.key for c in columns),
            headers=tuple(c.header for c in columns),
            rows=cells,
        )
        self._cache[id(columns)] = _Memo(columns, rows, sort, ordered, now, table)
        self.renders += 1
        logger.debug("Rendered %d rows x %d columns", len(cells), len(columns))
        return table

    def invalidate(self, columns=None) -> None:
        """Drop the cached table for one column set, or all of them."""
        if columns is None:
            self._cache.clear()
        else:
            self._cache.pop(id(columns), None)

    def _refresh(self, memo, timed, now) -> RenderedTable:
        rows = []
        for row, cached in zip(memo.ordered, memo.table.rows):
            cells = list(cached)
            for i in timed:
                cells[i] = memo.columns[i].cell(row, now)
            rows.append(tuple(cells))
        memo.table = RenderedTable(memo.table.keys, memo.table.headers, tuple(rows))
        memo.now = now
        self.refreshes += 1
        return memo.table

    @staticmethod
    def _sort_index(columns, sort_key) -> int:
        for i, col in enumerate(columns):
            if col.key == sort_key:
                if not col.sortable:
                    raise ValueError(f"Column '{sort_key}' is not sortable")
                return i
        raise ValueError(f"No column '{sort_key}' in this column set")
