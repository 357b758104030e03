"""View state and the session-scoped store that owns it."""

from dataclasses import dataclass, field, replace
from typing import (
    Any,
    Callable,
    Dict,
    List,
    MutableMapping,
    NamedTuple,
    Optional,
    Tuple,
)

import numpy as np

from .selection import RowSelection

ASC = "asc"
DESC = "desc"

DEFAULT_PAGE_SIZE = 10
DEFAULT_SESSION_KEY = "order_grid_state"


class SortCriterion(NamedTuple):
    """One sort key: column key plus direction ('asc' or 'desc')."""

    column: str
    direction: str = ASC


@dataclass(frozen=True)
class ViewState:
    """
    Snapshot of every user-controllable table parameter.

    Snapshots are never modified in place. Updates build a new snapshot
    with the ``with_*`` helpers and hand it to ``ViewStateStore.commit``.

    Attributes:
        filters: Column key to filter value; absent key means no filter
        global_search: Text matched against searchable columns
        sort: Ordered sort criteria, the first one is the primary key
        column_visibility: Column key to visibility; absent key is visible
        selection: Selected record identifiers
        page_index: Zero-based page index
        page_size: Rows per page
    """

    filters: Dict[str, str] = field(default_factory=dict)
    global_search: str = ""
    sort: Tuple[SortCriterion, ...] = ()
    column_visibility: Dict[str, bool] = field(default_factory=dict)
    selection: RowSelection = field(default_factory=RowSelection)
    page_index: int = 0
    page_size: int = DEFAULT_PAGE_SIZE

    def with_filter(self, key: str, value: Optional[str]) -> "ViewState":
        """Set or clear (``None``/empty) the filter on one column."""
        filters = dict(self.filters)
        if value:
            filters[key] = value
        else:
            filters.pop(key, None)
        return replace(self, filters=filters)

    def with_visibility(self, key: str, visible: bool) -> "ViewState":
        """Show or hide a column; only hidden columns are recorded."""
        if visible == self.is_visible(key):
            return self
        column_visibility = dict(self.column_visibility)
        if visible:
            column_visibility.pop(key, None)
        else:
            column_visibility[key] = False
        return replace(self, column_visibility=column_visibility)

    def sort_direction(self, key: str) -> Optional[str]:
        """Current direction for a column, or None if it is not sorted."""
        for criterion in self.sort:
            if criterion.column == key:
                return criterion.direction
        return None

    def sort_position(self, key: str) -> Optional[int]:
        for position, criterion in enumerate(self.sort):
            if criterion.column == key:
                return position
        return None

    def is_visible(self, key: str) -> bool:
        return self.column_visibility.get(key, True)


class ViewStateStore:
    """
    Holds the single ``ViewState`` of a session.

    The snapshot lives in a session mapping under ``session_key`` together
    with a session id and a change counter, so a Streamlit rerun picks up
    the view the operator left. By default the mapping is Streamlit's
    ``st.session_state``; any ``MutableMapping`` can be injected instead.

    Only ``commit`` and ``reset`` write the snapshot. Observers are not
    called by the store itself; the table notifies them once the committed
    state has been derived.
    """

    def __init__(
        self,
        session_key: str = DEFAULT_SESSION_KEY,
        initial: Optional[ViewState] = None,
        session_state: Optional[MutableMapping[str, Any]] = None,
    ):
        """
        Initialize the store.

        Args:
            session_key: Key in the session mapping. Use different keys for
                independent tables on the same page.
            initial: Snapshot used for a new session and by ``reset``
            session_state: Mapping to keep state in. Defaults to Streamlit's
                session_state.
        """
        self._session_key = session_key
        self._session_state = session_state
        self._initial = initial if initial is not None else ViewState()
        self._observers: List[Callable[[ViewState], None]] = []
        self._ensure_session_state()

    @property
    def _session(self) -> MutableMapping[str, Any]:
        if self._session_state is not None:
            return self._session_state

        import streamlit as st

        return st.session_state

    def _ensure_session_state(self) -> None:
        """Ensure session state is initialized."""
        session = self._session
        if self._session_key not in session:
            session[self._session_key] = {
                "counter": 0,
                "id": float(np.random.random()),
                "view": self._initial,
            }

    @property
    def _state(self) -> Dict[str, Any]:
        self._ensure_session_state()
        return self._session[self._session_key]

    @property
    def session_id(self) -> float:
        """Get the unique session ID."""
        return self._state["id"]

    @property
    def counter(self) -> int:
        """Number of committed changes in this session."""
        return self._state["counter"]

    @property
    def state(self) -> ViewState:
        """The current snapshot."""
        return self._state["view"]

    @property
    def initial(self) -> ViewState:
        return self._initial

    def commit(self, new_state: ViewState) -> bool:
        """
        Replace the snapshot.

        Args:
            new_state: The complete next snapshot

        Returns:
            True if the state changed, False otherwise
        """
        if new_state == self._state["view"]:
            return False

        self._state["view"] = new_state
        self._state["counter"] += 1
        return True

    def reset(self) -> bool:
        """Return to the initial snapshot."""
        return self.commit(self._initial)

    def subscribe(self, callback: Callable[[ViewState], None]) -> Callable[[], None]:
        """
        Register an observer called with each committed snapshot.

        Returns:
            Function that removes the observer
        """
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def notify(self) -> None:
        state = self.state
        for callback in list(self._observers):
            callback(state)

    def __repr__(self) -> str:
        return (
            f"ViewStateStore(session_key='{self._session_key}', "
            f"counter={self.counter}, "
            f"state={self.state})"
        )
