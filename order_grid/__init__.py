"""
Order Grid - tabular data engine for order management views.

Turns a fixed set of order records plus a view state (filters, sort,
column visibility, selection, page window) into the rows to render, and
keeps that derivation consistent as the view state changes.
"""

import logging

from .components.table import ColumnState, OrderTable, TablePage
from .core.columns import STATUS_ORDER, ColumnDescriptor, ColumnRegistry, order_columns
from .core.errors import DuplicateRecordIdError, UnknownColumnError
from .core.selection import RowSelection
from .core.state import SortCriterion, ViewState, ViewStateStore
from .sample_data import generate_orders

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Core
    "ColumnDescriptor",
    "ColumnRegistry",
    "order_columns",
    "STATUS_ORDER",
    "RowSelection",
    "SortCriterion",
    "ViewState",
    "ViewStateStore",
    "DuplicateRecordIdError",
    "UnknownColumnError",
    # Components
    "OrderTable",
    "TablePage",
    "ColumnState",
    # Utilities
    "generate_orders",
]
