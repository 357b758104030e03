"""Core infrastructure for order_grid."""

from .columns import (
    STATUS_ORDER,
    ColumnDescriptor,
    ColumnRegistry,
    order_columns,
)
from .errors import DuplicateRecordIdError, UnknownColumnError
from .selection import RowSelection
from .state import SortCriterion, ViewState, ViewStateStore

__all__ = [
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
]
