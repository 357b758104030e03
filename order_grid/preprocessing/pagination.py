"""Pagination stage: fixed-size windows over the ordered records."""

import math
from dataclasses import dataclass

import polars as pl


@dataclass(frozen=True)
class PageWindow:
    """
    One page of ordered records.

    Attributes:
        rows: The page's rows
        page_index: Zero-based index after clamping
        page_size: Rows per page
        page_count: Number of pages, at least 1
        total_rows: Number of rows across all pages
        can_prev: Whether a previous page exists
        can_next: Whether a next page exists
    """

    rows: pl.DataFrame
    page_index: int
    page_size: int
    page_count: int
    total_rows: int
    can_prev: bool
    can_next: bool


def page_count(total_rows: int, page_size: int) -> int:
    """Number of pages for a row count; an empty set is still one page."""
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    return max(1, math.ceil(total_rows / page_size))


def clamp_page_index(page_index: int, total_pages: int) -> int:
    """Constrain a page index to ``[0, total_pages - 1]``."""
    return min(max(page_index, 0), total_pages - 1)


def paginate(ordered: pl.DataFrame, page_index: int, page_size: int) -> PageWindow:
    """
    Slice the current page out of an ordered frame.

    An out-of-range ``page_index`` is clamped to the nearest existing page
    rather than producing an empty window.

    Args:
        ordered: Filtered and sorted records
        page_index: Requested zero-based page index
        page_size: Rows per page

    Returns:
        PageWindow for the clamped page
    """
    total_rows = ordered.height
    total_pages = page_count(total_rows, page_size)
    index = clamp_page_index(page_index, total_pages)

    return PageWindow(
        rows=ordered.slice(index * page_size, page_size),
        page_index=index,
        page_size=page_size,
        page_count=total_pages,
        total_rows=total_rows,
        can_prev=index > 0,
        can_next=index < total_pages - 1,
    )
