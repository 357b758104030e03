"""Order table engine: view-state mutations and derived page queries."""

import logging
from dataclasses import dataclass, replace
from typing import (
    Any,
    Callable,
    Dict,
    Hashable,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Sequence,
    Union,
)

import pandas as pd
import polars as pl

from ..core.columns import ColumnDescriptor, ColumnRegistry
from ..core.errors import DuplicateRecordIdError, UnknownColumnError
from ..core.selection import ALL
from ..core.state import (
    ASC,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SESSION_KEY,
    DESC,
    SortCriterion,
    ViewState,
    ViewStateStore,
)
from ..preprocessing.pipeline import DerivedView, derive_view
from ..preprocessing.sorting import next_sort_direction
from ..rendering.formatters import (
    Formatter,
    date_formatter,
    default_formatter,
    money_formatter,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE_OPTIONS = (5, 10, 20, 30, 40, 50)

RecordsInput = Union[pl.DataFrame, pl.LazyFrame, Sequence[Mapping[str, Any]]]


@dataclass(frozen=True)
class TablePage:
    """
    The rows to render plus pagination and selection totals.

    Attributes:
        rows: Current page rows, index field plus visible columns
        page_index: Zero-based page index (already clamped)
        page_count: Number of pages, at least 1
        page_size: Rows per page
        total_filtered: Rows matching the filters across all pages
        total_selected_in_filtered: Selected rows among the filtered rows
        can_prev: Whether a previous page exists
        can_next: Whether a next page exists
        index_field: Name of the record identifier column
    """

    rows: pl.DataFrame
    page_index: int
    page_count: int
    page_size: int
    total_filtered: int
    total_selected_in_filtered: int
    can_prev: bool
    can_next: bool
    index_field: str = "id"

    def row_ids(self) -> List[Hashable]:
        return self.rows[self.index_field].to_list()

    def to_dicts(self) -> List[Dict[str, Any]]:
        return self.rows.to_dicts()

    def to_pandas(self) -> pd.DataFrame:
        """Page rows as pandas, e.g. for ``st.dataframe``."""
        return self.rows.to_pandas()


@dataclass(frozen=True)
class ColumnState:
    """Per-column metadata for rendering headers and column menus."""

    key: str
    label: str
    visible: bool
    sort_state: Optional[str]
    sort_index: Optional[int]
    sortable: bool
    filterable: bool
    hideable: bool
    filter_value: Optional[str]


class OrderTable:
    """
    Paginated, sortable, filterable, multi-select table over a fixed
    in-memory record set.

    Every mutation builds a complete new ``ViewState``, derives it
    (filter, sort, paginate), folds any page clamp back into it, commits it
    to the store and then notifies observers. Invalid requests (unknown
    columns or records, columns that cannot be sorted, filtered or hidden)
    are logged and leave the state untouched.

    Example:
        table = OrderTable(generate_orders(seed=7), columns=order_columns())
        table.set_column_filter("status", "pending")
        table.toggle_column_sort("price")
        page = table.get_page()
        page.row_ids()
    """

    def __init__(
        self,
        data: RecordsInput,
        columns: Optional[Union[ColumnRegistry, Sequence[ColumnDescriptor]]] = None,
        index_field: str = "id",
        page_size: int = DEFAULT_PAGE_SIZE,
        page_size_options: Sequence[int] = DEFAULT_PAGE_SIZE_OPTIONS,
        initial_sort: Optional[Sequence[Any]] = None,
        session_key: str = DEFAULT_SESSION_KEY,
        session_state: Optional[MutableMapping[str, Any]] = None,
    ):
        """
        Initialize the table.

        Args:
            data: Records as a polars DataFrame/LazyFrame or a sequence of
                mappings. Collected once; never modified.
            columns: Column registry or descriptor list. If None,
                auto-generates descriptors from the data schema.
            index_field: Field holding the unique record identifier
            page_size: Initial rows per page
            page_size_options: Page sizes offered to the operator
            initial_sort: Sort applied to a new session, as SortCriterion
                tuples or dicts like [{'column': 'price', 'dir': 'desc'}]
            session_key: Key of this table's state in the session mapping
            session_state: Mapping holding session state. Defaults to
                Streamlit's session_state.

        Raises:
            ValueError: If the index field is missing, a column accessor
                does not resolve against the records, or page_size is not
                positive
            DuplicateRecordIdError: If identifiers are null or repeated
            UnknownColumnError: If initial_sort names an unknown column
        """
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")

        self._index_field = index_field
        if columns is None or isinstance(columns, ColumnRegistry):
            registry = columns
        else:
            registry = ColumnRegistry(columns)

        self._records = self._load_records(data, index_field, registry)
        self._record_ids = frozenset(self._records[index_field].to_list())

        if registry is None:
            registry = ColumnRegistry.from_schema(
                self._records.schema, exclude=[index_field]
            )
        self._registry = registry
        self._check_accessors()

        self._page_size_options = tuple(page_size_options)
        self._session_key = session_key
        self._formatters: Dict[str, Formatter] = {}

        initial = ViewState(
            sort=self._parse_sort(initial_sort or []),
            page_size=page_size,
        )
        self._store = ViewStateStore(
            session_key, initial=initial, session_state=session_state
        )
        self._derived_state: Optional[ViewState] = None
        self._derived: Optional[DerivedView] = None
        # A restored session may hold a page index the data no longer has
        self._apply(self._store.state)

    @staticmethod
    def _load_records(
        data: RecordsInput, index_field: str, registry: Optional[ColumnRegistry]
    ) -> pl.DataFrame:
        if isinstance(data, pl.LazyFrame):
            records = data.collect()
        elif isinstance(data, pl.DataFrame):
            records = data
        else:
            rows = list(data)
            if rows:
                records = pl.DataFrame(rows)
            elif registry is not None:
                # No rows to infer a schema from; take it from the columns
                records = registry.empty_frame(index_field)
            else:
                records = pl.DataFrame(schema={index_field: pl.Utf8})

        if index_field not in records.columns:
            raise ValueError(
                f"Index field '{index_field}' not found in records. "
                f"Available fields: {records.columns}"
            )

        ids = records[index_field]
        if ids.null_count():
            raise DuplicateRecordIdError(
                f"{ids.null_count()} record(s) have no '{index_field}' value"
            )
        duplicated = ids.filter(ids.is_duplicated()).unique(maintain_order=True)
        if len(duplicated):
            raise DuplicateRecordIdError(
                f"Duplicate '{index_field}' values: {duplicated.to_list()}"
            )
        return records

    def _check_accessors(self) -> None:
        """Every accessor must resolve against the record schema."""
        try:
            self._records.head(0).select(
                [column.value_expr().alias(column.key) for column in self._registry]
            )
        except pl.exceptions.ColumnNotFoundError as e:
            raise ValueError(f"Column accessor does not match the records: {e}") from e

    def _parse_sort(self, initial_sort: Sequence[Any]) -> tuple:
        criteria = []
        for entry in initial_sort:
            if isinstance(entry, Mapping):
                entry = SortCriterion(entry["column"], entry.get("dir", ASC))
            else:
                entry = SortCriterion(*entry)
            if entry.direction not in (ASC, DESC):
                raise ValueError(
                    f"Unknown sort direction '{entry.direction}' "
                    f"for column '{entry.column}'"
                )
            self._registry.get(entry.column)
            criteria.append(entry)
        return tuple(criteria)

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def _apply(self, new_state: ViewState) -> None:
        """Derive, clamp, commit and notify, in that order."""
        derived = derive_view(self._records, self._registry, new_state)
        if derived.page.page_index != new_state.page_index:
            new_state = replace(new_state, page_index=derived.page.page_index)

        changed = self._store.commit(new_state)
        self._derived_state = self._store.state
        self._derived = derived
        if changed:
            self._store.notify()

    def _view(self) -> DerivedView:
        """Derived view for the stored snapshot, re-derived if it moved."""
        state = self._store.state
        if self._derived is None or state is not self._derived_state:
            self._apply(state)
        return self._derived

    def _lookup(self, key: str, action: str) -> Optional[ColumnDescriptor]:
        try:
            return self._registry.get(key)
        except UnknownColumnError:
            logger.warning("Ignoring %s on unknown column '%s'", action, key)
            return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_column_filter(self, key: str, value: Optional[Any]) -> None:
        """Filter a column; ``None`` or an empty string clears the filter."""
        column = self._lookup(key, "filter")
        if column is None:
            return
        if not column.filterable:
            logger.debug("Ignoring filter on non-filterable column '%s'", key)
            return
        text = None if value is None else str(value)
        self._apply(self._store.state.with_filter(key, text))

    def set_global_search(self, value: Optional[str]) -> None:
        self._apply(replace(self._store.state, global_search=value or ""))

    def toggle_column_sort(self, key: str, multi: bool = False) -> None:
        """
        Advance a column through unsorted, ascending, descending, unsorted.

        Args:
            key: Column key
            multi: Keep the other sort criteria and cycle this column in
                place (appended as the last key when newly sorted). When
                False the column becomes the only sort key, unless it is
                already the last key, in which case it cycles in place.
                Either way, reaching unsorted drops only this column.
        """
        column = self._lookup(key, "sort")
        if column is None:
            return
        if not column.sortable:
            logger.debug("Ignoring sort on non-sortable column '%s'", key)
            return

        state = self._store.state
        direction = next_sort_direction(state.sort_direction(key))

        criteria = list(state.sort)
        position = state.sort_position(key)
        if direction is None:
            del criteria[position]
        elif position is None:
            if multi:
                criteria.append(SortCriterion(key, direction))
            else:
                criteria = [SortCriterion(key, direction)]
        elif multi or position == len(criteria) - 1:
            criteria[position] = SortCriterion(key, direction)
        else:
            criteria = [SortCriterion(key, direction)]

        self._apply(replace(state, sort=tuple(criteria)))

    def set_column_visibility(self, key: str, visible: bool) -> None:
        column = self._lookup(key, "visibility change")
        if column is None:
            return
        if not column.hideable:
            logger.debug("Ignoring visibility change on column '%s'", key)
            return
        self._apply(self._store.state.with_visibility(key, bool(visible)))

    def set_page(self, index: int) -> None:
        """Go to a page; out-of-range indices clamp to the nearest page."""
        self._apply(replace(self._store.state, page_index=int(index)))

    def next_page(self) -> None:
        self.set_page(self._store.state.page_index + 1)

    def previous_page(self) -> None:
        self.set_page(self._store.state.page_index - 1)

    def set_page_size(self, size: int) -> None:
        """Change rows per page and return to the first page."""
        if size <= 0:
            logger.warning("Ignoring non-positive page size %s", size)
            return
        self._apply(replace(self._store.state, page_size=int(size), page_index=0))

    def toggle_row_selection(
        self, record_id: Hashable, value: Optional[bool] = None
    ) -> None:
        """
        Select or deselect one record.

        Args:
            record_id: Record identifier
            value: True to select, False to deselect, None to flip
        """
        if record_id not in self._record_ids:
            logger.warning("Ignoring selection of unknown record '%s'", record_id)
            return

        state = self._store.state
        if value is None:
            selection = state.selection.toggle(record_id)
        elif value:
            selection = state.selection.select(record_id)
        else:
            selection = state.selection.deselect(record_id)
        self._apply(replace(state, selection=selection))

    def toggle_all_on_page(self, selected: Optional[bool] = None) -> None:
        """
        Select or deselect every row on the current page.

        Rows on other pages and rows hidden by filters are never touched.

        Args:
            selected: True to select, False to deselect, None to deselect
                when all page rows are already selected and select otherwise
        """
        page_ids = self._page_ids()
        state = self._store.state
        if selected is None:
            selected = state.selection.state_for(page_ids) != ALL
        selection = state.selection.select_all_visible(page_ids, selected)
        self._apply(replace(state, selection=selection))

    def clear_selection(self) -> None:
        state = self._store.state
        self._apply(replace(state, selection=state.selection.clear()))

    def clear_filters(self) -> None:
        """Drop every column filter and the global search."""
        self._apply(replace(self._store.state, filters={}, global_search=""))

    def reset_view(self) -> None:
        """Return filters, sort, visibility, selection and paging to defaults."""
        self._apply(self._store.initial)

    def subscribe(self, callback: Callable[[ViewState], None]) -> Callable[[], None]:
        """
        Call ``callback`` with the new snapshot after each committed change.

        Returns:
            Function that removes the observer
        """
        return self._store.subscribe(callback)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _visible_columns(self, state: ViewState) -> List[ColumnDescriptor]:
        return [column for column in self._registry if state.is_visible(column.key)]

    def _page_ids(self) -> List[Hashable]:
        return self._view().page.rows[self._index_field].to_list()

    def get_page(self) -> TablePage:
        """Current page rows (visible columns only) with totals."""
        view = self._view()
        state = self._store.state
        page = view.page

        rows = page.rows.select(
            [pl.col(self._index_field)]
            + [
                column.value_expr().alias(column.key)
                for column in self._visible_columns(state)
                if column.key != self._index_field
            ]
        )
        filtered_ids = view.ordered[self._index_field].to_list()

        return TablePage(
            rows=rows,
            page_index=page.page_index,
            page_count=page.page_count,
            page_size=page.page_size,
            total_filtered=page.total_rows,
            total_selected_in_filtered=state.selection.count_within(filtered_ids),
            can_prev=page.can_prev,
            can_next=page.can_next,
            index_field=self._index_field,
        )

    def get_columns(self) -> List[ColumnState]:
        """Header metadata for every registered column, in display order."""
        state = self._store.state
        return [
            ColumnState(
                key=column.key,
                label=column.label,
                visible=state.is_visible(column.key),
                sort_state=state.sort_direction(column.key),
                sort_index=state.sort_position(column.key),
                sortable=column.sortable,
                filterable=column.filterable,
                hideable=column.hideable,
                filter_value=state.filters.get(column.key),
            )
            for column in self._registry
        ]

    def is_selected(self, record_id: Hashable) -> bool:
        return self._store.state.selection.is_selected(record_id)

    def selection_count(self) -> int:
        return self._store.state.selection.count()

    def page_selection_state(self) -> str:
        """Header checkbox state for the current page: 'all', 'some' or 'none'."""
        return self._store.state.selection.state_for(self._page_ids())

    def selected_rows(self) -> pl.DataFrame:
        """Selected records that pass the filters, in display order."""
        view = self._view()
        selection = self._store.state.selection
        if not selection:
            return view.ordered.head(0)
        return view.ordered.filter(pl.col(self._index_field).is_in(list(selection.ids)))

    def format_page(self) -> List[Dict[str, str]]:
        """Current page rows with every cell rendered through its formatter."""
        formatted = []
        for row in self.get_page().to_dicts():
            formatted.append(
                {
                    key: self._formatters.get(key, default_formatter)(value)
                    for key, value in row.items()
                }
            )
        return formatted

    # ------------------------------------------------------------------
    # Formatters
    # ------------------------------------------------------------------

    def with_formatter(self, field: str, formatter: Formatter) -> "OrderTable":
        """
        Set the display formatter for a column.

        Returns:
            Self for method chaining

        Raises:
            UnknownColumnError: If the column is not registered
        """
        if field != self._index_field:
            self._registry.get(field)
        self._formatters[field] = formatter
        return self

    def with_money_format(
        self,
        field: str,
        symbol: str = "$",
        precision: int = 2,
        thousand: str = ",",
        decimal: str = ".",
    ) -> "OrderTable":
        """
        Format a column as currency/money.

        Returns:
            Self for method chaining
        """
        return self.with_formatter(
            field,
            money_formatter(
                symbol=symbol, precision=precision, thousand=thousand, decimal=decimal
            ),
        )

    def with_date_format(self, field: str, pattern: str = "%b %d, %Y") -> "OrderTable":
        """
        Format a date column with a ``strftime`` pattern.

        Returns:
            Self for method chaining
        """
        return self.with_formatter(field, date_formatter(pattern))

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def view_state(self) -> ViewState:
        return self._store.state

    @property
    def registry(self) -> ColumnRegistry:
        return self._registry

    @property
    def records(self) -> pl.DataFrame:
        return self._records

    @property
    def page_size_options(self) -> tuple:
        return self._page_size_options

    def get_config(self) -> Dict[str, Any]:
        """Configuration the table was built with."""
        return {
            "index_field": self._index_field,
            "page_size": self._store.initial.page_size,
            "page_size_options": list(self._page_size_options),
            "initial_sort": [
                {"column": criterion.column, "dir": criterion.direction}
                for criterion in self._store.initial.sort
            ],
            "session_key": self._session_key,
            "columns": self._registry.keys(),
        }

    def __repr__(self) -> str:
        return (
            f"OrderTable(records={self._records.height}, "
            f"columns={self._registry.keys()}, "
            f"state={self._store.state})"
        )
