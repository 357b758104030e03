"""Row selection keyed by record identifier."""

from typing import Any, FrozenSet, Hashable, Iterable, Iterator

# Tri-state of a page header checkbox
ALL = "all"
SOME = "some"
NONE = "none"


class RowSelection:
    """
    Immutable set of selected record identifiers.

    Every operation returns a new ``RowSelection``; the view-state store
    swaps the instance as part of an atomic update. Selection is never
    keyed by row position, so it survives re-sorting, re-filtering and
    paging. Identifiers that drop out of the filtered rows stay selected.
    """

    __slots__ = ("_ids",)

    def __init__(self, ids: Iterable[Hashable] = ()):
        self._ids: FrozenSet[Hashable] = frozenset(ids)

    @property
    def ids(self) -> FrozenSet[Hashable]:
        return self._ids

    def select(self, record_id: Hashable) -> "RowSelection":
        if record_id in self._ids:
            return self
        return RowSelection(self._ids | {record_id})

    def deselect(self, record_id: Hashable) -> "RowSelection":
        if record_id not in self._ids:
            return self
        return RowSelection(self._ids - {record_id})

    def toggle(self, record_id: Hashable) -> "RowSelection":
        if record_id in self._ids:
            return self.deselect(record_id)
        return self.select(record_id)

    def select_all_visible(
        self, record_ids: Iterable[Hashable], value: bool = True
    ) -> "RowSelection":
        """
        Add or remove exactly the given identifiers.

        Args:
            record_ids: Identifiers of the rows currently visible
            value: True unions them into the selection, False removes them
                and leaves selections made elsewhere untouched

        Returns:
            The updated selection (``self`` when nothing changes)
        """
        ids = frozenset(record_ids)
        updated = self._ids | ids if value else self._ids - ids
        if updated == self._ids:
            return self
        return RowSelection(updated)

    def clear(self) -> "RowSelection":
        if not self._ids:
            return self
        return RowSelection()

    def is_selected(self, record_id: Hashable) -> bool:
        return record_id in self._ids

    def count(self) -> int:
        return len(self._ids)

    def count_within(self, record_ids: Iterable[Hashable]) -> int:
        """Number of the given identifiers that are selected."""
        return sum(1 for record_id in record_ids if record_id in self._ids)

    def state_for(self, record_ids: Iterable[Hashable]) -> str:
        """
        Header checkbox state for a set of rows.

        Returns:
            'all' when every row is selected, 'some' when at least one is,
            'none' otherwise (including when there are no rows)
        """
        ids = list(record_ids)
        selected = self.count_within(ids)
        if ids and selected == len(ids):
            return ALL
        if selected:
            return SOME
        return NONE

    def __contains__(self, record_id: Any) -> bool:
        return record_id in self._ids

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RowSelection):
            return NotImplemented
        return self._ids == other._ids

    def __hash__(self) -> int:
        return hash(self._ids)

    def __repr__(self) -> str:
        return f"RowSelection({sorted(map(str, self._ids))})"
