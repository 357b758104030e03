"""Filter stage: per-column filters plus a global search."""

import logging
from functools import reduce
from typing import Mapping, Optional, Union

import polars as pl

from ..core.columns import ColumnRegistry

logger = logging.getLogger(__name__)


def column_filter_expr(
    registry: ColumnRegistry, filters: Mapping[str, Optional[str]]
) -> Optional[pl.Expr]:
    """
    Combine per-column filters into one predicate.

    Empty values impose no constraint. Filters naming unknown or
    non-filterable columns are skipped.

    Args:
        registry: Column registry
        filters: Mapping of column keys to filter values

    Returns:
        AND of all active column predicates, or None if none is active
    """
    predicates = []
    for key, value in filters.items():
        if not value:
            continue
        if key not in registry:
            logger.debug("Skipping filter on unknown column '%s'", key)
            continue
        column = registry.get(key)
        if not column.filterable:
            logger.debug("Skipping filter on non-filterable column '%s'", key)
            continue
        predicates.append(column.match_expr(value))

    if not predicates:
        return None
    return reduce(lambda left, right: left & right, predicates)


def global_search_expr(
    registry: ColumnRegistry, global_search: Optional[str]
) -> Optional[pl.Expr]:
    """
    Predicate for the global search box.

    A record matches when any searchable column contains the search text,
    ignoring case. With no searchable columns the search matches nothing.

    Returns:
        The predicate, or None when the search is empty
    """
    if not global_search:
        return None

    needle = global_search.lower()
    predicates = [
        column.value_expr()
        .cast(pl.Utf8)
        .str.to_lowercase()
        .str.contains(needle, literal=True)
        .fill_null(False)
        for column in registry.searchable()
    ]
    if not predicates:
        return pl.lit(False)
    return reduce(lambda left, right: left | right, predicates)


def apply_filters(
    data: Union[pl.LazyFrame, pl.DataFrame],
    registry: ColumnRegistry,
    filters: Mapping[str, Optional[str]],
    global_search: Optional[str] = None,
) -> pl.LazyFrame:
    """
    Filter records by column filters AND the global search.

    The result keeps the input's relative row order and never modifies
    the input frame.

    Args:
        data: The records to filter (LazyFrame or DataFrame)
        registry: Column registry
        filters: Mapping of column keys to filter values
        global_search: Optional text matched against searchable columns

    Returns:
        Filtered LazyFrame
    """
    if isinstance(data, pl.DataFrame):
        data = data.lazy()

    for predicate in (
        column_filter_expr(registry, filters),
        global_search_expr(registry, global_search),
    ):
        if predicate is not None:
            data = data.filter(predicate)

    return data
