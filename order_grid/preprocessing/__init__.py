"""Derivation stages: filtering, sorting and pagination."""

from .filtering import apply_filters
from .pagination import PageWindow, paginate
from .pipeline import DerivedView, derive_view
from .sorting import apply_sort, next_sort_direction

__all__ = [
    "apply_filters",
    "apply_sort",
    "next_sort_direction",
    "paginate",
    "PageWindow",
    "derive_view",
    "DerivedView",
]
