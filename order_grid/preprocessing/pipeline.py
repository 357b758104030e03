"""Derivation pipeline: filter, then sort, then paginate."""

from dataclasses import dataclass

import polars as pl

from ..core.columns import ColumnRegistry
from ..core.state import ViewState
from .filtering import apply_filters
from .pagination import PageWindow, paginate
from .sorting import apply_sort


@dataclass(frozen=True)
class DerivedView:
    """
    Everything derived from one view-state snapshot.

    Attributes:
        ordered: Filtered and sorted records (all pages)
        page: The current page window
    """

    ordered: pl.DataFrame
    page: PageWindow


def derive_view(
    records: pl.DataFrame, registry: ColumnRegistry, state: ViewState
) -> DerivedView:
    """
    Run the full pipeline for a snapshot.

    This is a pure function: the same records and snapshot always yield
    the same rows in the same order.

    Args:
        records: The raw record set
        registry: Column registry
        state: View-state snapshot

    Returns:
        DerivedView with the ordered rows and the clamped current page
    """
    filtered = apply_filters(records, registry, state.filters, state.global_search)
    ordered = apply_sort(filtered, registry, state.sort).collect()
    page = paginate(ordered, state.page_index, state.page_size)
    return DerivedView(ordered=ordered, page=page)
