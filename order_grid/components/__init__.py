"""Table components."""

from .table import ColumnState, OrderTable, TablePage

__all__ = ["OrderTable", "TablePage", "ColumnState"]
