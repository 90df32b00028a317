"""Debounced single-column search input bound to a grid store.

The box keeps the typed text and the column it searches.  Typed text is
applied as a substring filter on that column once the input has been
quiet for the configured debounce period.
"""

import logging
from collections.abc import Sequence

from reflex_datatable.offload import Debouncer
from reflex_datatable.store import GridStore

logger = logging.getLogger(__name__)


class SearchBox:
    """Search text plus column picker for one grid.

    Args:
        store: Grid the filter is applied to.
        search_column: Column searched initially.  Defaults to the first
            entry of *searchable_columns*, then to the first grid column.
        searchable_columns: Columns offered by the column picker.  Empty
            means every grid column.
        debounce: Quiet period in seconds.  Defaults to the store's
            ``config.debounce_seconds``.
    """

    def __init__(
        self,
        store: GridStore,
        search_column: str | None = None,
        searchable_columns: Sequence[str] = (),
        debounce: float | None = None,
    ) -> None:
        self.store = store
        self.searchable_columns = list(searchable_columns) or [column.id for column in store.columns]
        if search_column is None and self.searchable_columns:
            search_column = self.searchable_columns[0]
        self.search_column = search_column
        self.value = ""
        delay = store.config.debounce_seconds if debounce is None else debounce
        self._debouncer = Debouncer(delay, self._apply)

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def handle_search(self, value: str | None) -> None:
        """Record typed text; the filter follows after the quiet period."""
        self.value = value or ""
        self._debouncer.call(self.search_column, self.value)

    def set_search_column(self, column_id: str) -> None:
        """Switch the searched column, moving any active text over at once."""
        if column_id == self.search_column:
            return
        if self.searchable_columns and column_id not in self.searchable_columns:
            logger.debug("[SearchBox] column %r is not searchable", column_id)
            return
        self._debouncer.cancel()
        previous = self.search_column
        self.search_column = column_id
        if self.value:
            if previous is not None:
                self.store.set_filter(previous, None)
            self._apply(column_id, self.value)

    def clear(self) -> None:
        """Drop the text and the filter immediately."""
        self._debouncer.cancel()
        self.value = ""
        if self.search_column is not None:
            self.store.set_filter(self.search_column, None)

    def close(self) -> None:
        self._debouncer.cancel()

    def _apply(self, column_id: str | None, text: str) -> None:
        if column_id is None:
            return
        logger.debug("[SearchBox] apply %r to column %r", text, column_id)
        self.store.set_filter(column_id, text or None)
