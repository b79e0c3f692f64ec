"""
Tabular rendering pipeline.

Row models, pure cell primitives, column descriptors composed per entity
kind, and the TableComposer that renders rows through a column set.
"""

from tables.models import Position, Holder, TopTrader
from tables.primitives import CellValue, is_positive, identity_or_fallback, short_ref, sort_magnitude, time_ago
from tables.columns import ColumnDescriptor, ColumnRegistry, RegistryError, extend, prepend
from tables.composer import TableComposer, RenderedTable
from tables.catalog import REGISTRY
