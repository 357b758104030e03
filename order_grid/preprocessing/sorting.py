"""Sort stage: stable multi-key ordering of filtered records."""

import logging
from typing import Optional, Sequence, Union

import polars as pl

from ..core.columns import ColumnRegistry
from ..core.state import ASC, DESC, SortCriterion

logger = logging.getLogger(__name__)

# Header click cycle: unsorted -> ascending -> descending -> unsorted
_NEXT_DIRECTION = {None: ASC, ASC: DESC, DESC: None}


def next_sort_direction(current: Optional[str]) -> Optional[str]:
    """
    Direction after one more header click.

    Args:
        current: Current direction ('asc', 'desc') or None if unsorted

    Returns:
        The next direction, None meaning the column becomes unsorted
    """
    if current not in _NEXT_DIRECTION:
        raise ValueError(
            f"Unknown sort direction '{current}'. Expected 'asc', 'desc' or None"
        )
    return _NEXT_DIRECTION[current]


def apply_sort(
    data: Union[pl.LazyFrame, pl.DataFrame],
    registry: ColumnRegistry,
    criteria: Sequence[SortCriterion],
) -> pl.LazyFrame:
    """
    Order records by the given criteria.

    The first criterion is the primary key and later ones break ties. Rows
    that tie on every criterion keep their input order, and with no
    criteria the input order is returned unchanged. Nulls sort last in
    either direction.

    Args:
        data: The records to sort (LazyFrame or DataFrame)
        registry: Column registry
        criteria: Ordered sort criteria. Unknown or non-sortable columns
            are skipped.

    Returns:
        Sorted LazyFrame
    """
    if isinstance(data, pl.DataFrame):
        data = data.lazy()

    by = []
    descending = []
    for criterion in criteria:
        if criterion.column not in registry:
            logger.debug("Skipping sort on unknown column '%s'", criterion.column)
            continue
        column = registry.get(criterion.column)
        if not column.sortable:
            logger.debug("Skipping sort on non-sortable column '%s'", column.key)
            continue
        by.append(column.sort_expr())
        descending.append(criterion.direction == DESC)

    if not by:
        return data

    return data.sort(by, descending=descending, nulls_last=True, maintain_order=True)
