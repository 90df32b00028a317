"""Central grid state machine.

:class:`GridStore` owns every state slice of one grid (sorting, filters,
quick search, pagination, selection, column visibility, compact mode and
the expanded compact row) and derives the realized page from them:

    records -> filter (AND) -> search (OR) -> sort -> paginate

Each mutation changes one slice and then calls :meth:`GridStore._recompute`.
The filtered+sorted list is memoised against version counters of the
slices it depends on, so pagination, selection and visibility changes
never re-run the pipeline.

Large datasets (above ``GridConfig.offload_threshold``) are recomputed on
an :class:`~reflex_datatable.offload.AsyncOffloadProcessor` when an event
loop is running.  Until the newest request lands the store keeps serving
the last fully-applied view with ``pending`` set; superseded requests are
cancelled and any late result is dropped.

Typical usage::

    store = GridStore(records, [ColumnSpec("name"), ColumnSpec("status")])
    store.toggle_sort("name")
    store.set_filter("status", ["active"])
    for row in store.page_rows:
        ...
"""

import asyncio
import logging
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from reflex_datatable.actions import ActionGroup, ActionItem, MenuEntry, resolve_row_actions
from reflex_datatable.config import GridConfig
from reflex_datatable.filters import (
    FilterEngine,
    FilterValue,
    filter_value_to_json,
    is_active_filter,
    normalize_filter_value,
)
from reflex_datatable.models import ColumnSpec, GridRow, SortEntry, get_field
from reflex_datatable.offload import (
    AsyncOffloadProcessor,
    FilterPayload,
    SearchPayload,
    SortPayload,
)
from reflex_datatable.pagination import PageFacts, PaginationState
from reflex_datatable.responsive import ResponsiveModeSelector
from reflex_datatable.sorting import normalize_sorting, sort_records, toggle_sort
from reflex_datatable.summary import RowSummary, build_row_summary, select_summary_fields
from reflex_datatable.virtualizer import Virtualizer, VirtualWindow

logger = logging.getLogger(__name__)

GridListener = Callable[[str, "GridStore"], None]

EVENT_VIEW: str = "view"
EVENT_SELECTION: str = "selection"
EVENT_VISIBILITY: str = "visibility"
EVENT_COMPACT: str = "compact"


class GridStore:
    """State and derived view of one grid instance.

    Args:
        records: The record collection.  Replace it later with
            :meth:`set_records`.
        columns: Column specs in display order.
        config: Grid options; defaults to :class:`GridConfig`.
        id_field: Record field holding the stable row id.  Records
            without it are identified by their position.
        initial_sorting: Sort entries applied at creation and on
            :meth:`reset`.
        initial_filters: ``{column_id: filter_value}`` applied at creation
            and on :meth:`reset`.
        initial_page_size: Overrides ``config.initial_page_size``.
        initial_visibility: ``{column_id: visible}``; absent ids are visible.
        search_columns: Columns searched by :meth:`set_search`.  Defaults
            to every column.
        row_actions: Action declarations resolved per row.
        actions_column_id: Column that hosts the actions menu; excluded
            from compact summaries.
        summary_columns: Explicit compact summary columns.
        enable_row_selection: When False every selection call is a no-op.
        paginate: When False the realized rows are the whole filtered set
            (continuous scrolling; pair with virtualization).
        estimate_row_size: ``index -> pixels`` for the virtualizer.
        processor: Offload processor; one is created per store when omitted.
    """

    def __init__(
        self,
        records: Iterable[Any] = (),
        columns: Iterable[ColumnSpec] = (),
        *,
        config: GridConfig | None = None,
        id_field: str = "id",
        initial_sorting: Iterable[SortEntry | Mapping[str, Any] | tuple[str, bool]] | None = None,
        initial_filters: Mapping[str, Any] | None = None,
        initial_page_size: int | None = None,
        initial_visibility: Mapping[str, bool] | None = None,
        search_columns: Sequence[str] | None = None,
        row_actions: Sequence[ActionItem[Any] | ActionGroup[Any]] | None = None,
        actions_column_id: str | None = None,
        summary_columns: Sequence[str] | None = None,
        enable_row_selection: bool = True,
        paginate: bool = True,
        estimate_row_size: Callable[[int], int] | None = None,
        processor: AsyncOffloadProcessor | None = None,
    ) -> None:
        self.config = config or GridConfig()
        self.id_field = id_field
        self.row_actions: list[ActionItem[Any] | ActionGroup[Any]] = list(row_actions or [])
        self.actions_column_id = actions_column_id
        self.summary_columns = list(summary_columns) if summary_columns is not None else None
        self.enable_row_selection = enable_row_selection
        self.paginate = paginate

        self._columns: dict[str, ColumnSpec] = {}
        self._engine = FilterEngine(debug=self.config.debug)
        self._set_columns(columns)

        self._records: list[GridRow] = []
        self._set_records(records)

        self._initial_sorting = self._valid_sorting(normalize_sorting(initial_sorting or []))
        self._initial_filters = self._normalize_filters(initial_filters or {})
        self._initial_page_size = initial_page_size or self.config.initial_page_size
        self._initial_visibility = dict(initial_visibility or {})
        self._initial_search_columns = list(search_columns) if search_columns is not None else None

        self._sorting: list[SortEntry] = list(self._initial_sorting)
        self._filters: dict[str, FilterValue] = dict(self._initial_filters)
        self._search_term: str = ""
        self._search_columns: list[str] | None = self._initial_search_columns
        self._pagination = PaginationState(page_index=0, page_size=self._initial_page_size)
        self._selection: set[Any] = set()
        self._visibility: dict[str, bool] = self._valid_visibility(self._initial_visibility)
        self._expanded_row_id: Any = None

        self._responsive = ResponsiveModeSelector(self.config.compact_breakpoint)
        self._responsive.subscribe(self._on_compact_change)
        self._pre_compact_page_size: int | None = None

        self._processor = processor or AsyncOffloadProcessor(self.config.offload_threshold)
        self._owns_processor = processor is None
        self._task: asyncio.Task[None] | None = None
        self._request_token = 0

        self._versions: dict[str, int] = {"data": 0, "columns": 0, "filters": 0, "search": 0, "sorting": 0}
        self._view: list[GridRow] = []
        self._view_key: tuple[int, ...] | None = None
        self._pending = False
        self._pending_key: tuple[int, ...] | None = None

        self._virtualizer = Virtualizer(
            0,
            estimate_row_size or (lambda _index: self.config.estimated_row_size),
            overscan=self.config.overscan,
            threshold=self.config.virtualization_threshold,
        )
        self._listeners: list[GridListener] = []

        self._recompute()

    # ------------------------------------------------------------------
    # Normalisation helpers
    # ------------------------------------------------------------------

    def _set_columns(self, columns: Iterable[ColumnSpec]) -> None:
        self._columns = {}
        for column in columns:
            if column.id in self._columns:
                logger.warning("[GridStore] duplicate column id %r ignored", column.id)
                continue
            self._columns[column.id] = column
        self._engine = FilterEngine(self._columns, debug=self.config.debug)

    def _set_records(self, records: Iterable[Any]) -> None:
        rows: list[GridRow] = []
        for index, record in enumerate(records):
            row_id = get_field(record, self.id_field)
            rows.append(GridRow(id=index if row_id is None else row_id, index=index, record=record))
        self._records = rows

    def _known_column(self, column_id: str) -> bool:
        # Without a declared schema any field name is acceptable.
        return not self._columns or column_id in self._columns

    def _valid_sorting(self, sorting: list[SortEntry]) -> list[SortEntry]:
        valid: list[SortEntry] = []
        for entry in sorting:
            column = self._columns.get(entry.column_id)
            if not self._known_column(entry.column_id) or (column is not None and not column.sortable):
                logger.debug("[GridStore] ignoring sort on %r", entry.column_id)
                continue
            valid.append(entry)
        return valid

    def _normalize_filters(self, filters: Mapping[str, Any]) -> dict[str, FilterValue]:
        normalized: dict[str, FilterValue] = {}
        for column_id, value in filters.items():
            if not self._known_column(column_id):
                logger.debug("[GridStore] ignoring filter on unknown column %r", column_id)
                continue
            if is_active_filter(value):
                normalized[column_id] = normalize_filter_value(value)
        return normalized

    def _valid_visibility(self, visibility: Mapping[str, bool]) -> dict[str, bool]:
        valid: dict[str, bool] = {}
        for column_id, visible in visibility.items():
            column = self._columns.get(column_id)
            if column is None:
                logger.debug("[GridStore] ignoring visibility of unknown column %r", column_id)
                continue
            if not visible and not column.hideable:
                continue
            valid[column_id] = bool(visible)
        return valid

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def records(self) -> list[GridRow]:
        return list(self._records)

    @property
    def columns(self) -> list[ColumnSpec]:
        return list(self._columns.values())

    @property
    def sorting(self) -> list[SortEntry]:
        return list(self._sorting)

    @property
    def filters(self) -> dict[str, FilterValue]:
        return dict(self._filters)

    @property
    def search_term(self) -> str:
        return self._search_term

    @property
    def search_columns(self) -> list[str]:
        if self._search_columns is not None:
            return list(self._search_columns)
        return list(self._columns)

    @property
    def pagination(self) -> PaginationState:
        return self._pagination

    @property
    def selection(self) -> frozenset[Any]:
        return frozenset(self._selection)

    @property
    def column_visibility(self) -> dict[str, bool]:
        return {column_id: self.is_column_visible(column_id) for column_id in self._columns}

    @property
    def compact(self) -> bool:
        return self._responsive.compact

    @property
    def expanded_row_id(self) -> Any:
        return self._expanded_row_id

    @property
    def pending(self) -> bool:
        """True while an offloaded recompute has not landed yet."""
        return self._pending

    # ------------------------------------------------------------------
    # Derived view
    # ------------------------------------------------------------------

    @property
    def filtered_rows(self) -> list[GridRow]:
        """Filtered, searched and sorted rows (all pages)."""
        return list(self._view)

    @property
    def total_rows(self) -> int:
        return len(self._view)

    @property
    def page_rows(self) -> list[GridRow]:
        """The realized page handed to presentation."""
        if not self.paginate:
            return list(self._view)
        start, stop = self._pagination.page_bounds(len(self._view))
        return self._view[start:stop]

    @property
    def page_records(self) -> list[Any]:
        return [row.record for row in self.page_rows]

    @property
    def page_facts(self) -> PageFacts:
        return self._pagination.facts(len(self._view))

    @property
    def page_count(self) -> int:
        return self._pagination.page_count(len(self._view))

    @property
    def can_previous_page(self) -> bool:
        return self._pagination.can_previous_page()

    @property
    def can_next_page(self) -> bool:
        return self._pagination.can_next_page(len(self._view))

    def virtual_window(self, scroll_offset: float, viewport_size: float) -> VirtualWindow:
        """Window over :attr:`page_rows`; disabled below the virtualization threshold."""
        self._virtualizer.set_count(len(self.page_rows))
        return self._virtualizer.get_window(scroll_offset, viewport_size)

    @property
    def virtualizer(self) -> Virtualizer:
        self._virtualizer.set_count(len(self.page_rows))
        return self._virtualizer

    def is_column_visible(self, column_id: str) -> bool:
        return self._visibility.get(column_id, True)

    @property
    def visible_column_ids(self) -> list[str]:
        return [column_id for column_id in self._columns if self.is_column_visible(column_id)]

    @property
    def summary_fields(self) -> list[str]:
        excluded = [self.actions_column_id] if self.actions_column_id else []
        return select_summary_fields(
            self.visible_column_ids,
            self.summary_columns,
            excluded,
            hideable={column_id: column.hideable for column_id, column in self._columns.items()},
            minimum=self.config.summary_min,
            maximum=self.config.summary_max,
        )

    def row_summaries(self) -> list[RowSummary]:
        summary_ids = self.summary_fields
        visible = self.visible_column_ids
        return [
            build_row_summary(
                row,
                summary_ids,
                self._columns,
                visible,
                actions_column_id=self.actions_column_id,
            )
            for row in self.page_rows
        ]

    def resolve_actions(self, row: GridRow) -> list[MenuEntry]:
        return resolve_row_actions(row, self.row_actions)

    def facet_values(self, column_id: str) -> list[Any]:
        """Distinct values of a column over all records, for value-set filters."""
        return self._engine.facet_values(self._records, column_id)

    # ------------------------------------------------------------------
    # Recompute
    # ------------------------------------------------------------------

    def _derive_key(self) -> tuple[int, ...]:
        v = self._versions
        return (v["data"], v["columns"], v["filters"], v["search"], v["sorting"])

    def _bump(self, *slices: str) -> None:
        for name in slices:
            self._versions[name] += 1

    def _compute_sync(self) -> list[GridRow]:
        rows = self._engine.filter_records(self._records, self._filters)
        rows = self._engine.search_records(rows, self._search_term, self.search_columns)
        return sort_records(rows, self._sorting, self._columns)

    def _recompute(self) -> None:
        key = self._derive_key()
        if self._pending and key == self._pending_key:
            # Paging while a recompute is in flight keeps the in-flight request.
            self._clamp_pagination()
            self._emit(EVENT_VIEW)
            return
        if key == self._view_key and not self._pending:
            self._clamp_pagination()
            self._emit(EVENT_VIEW)
            return

        self._cancel_task()
        if self._processor.should_offload(len(self._records)):
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                self._request_token += 1
                self._pending = True
                self._pending_key = key
                self._task = loop.create_task(self._recompute_offloaded(key, self._request_token))
                return

        t0 = time.perf_counter()
        rows = self._compute_sync()
        elapsed_ms = (time.perf_counter() - t0) * 1000
        logger.debug(
            "[GridStore] recompute: rows=%d, matched=%d, elapsed=%.1fms (sync)",
            len(self._records),
            len(rows),
            elapsed_ms,
        )
        self._apply_view(key, rows)

    async def _recompute_offloaded(self, key: tuple[int, ...], token: int) -> None:
        records = list(self._records)
        filters = dict(self._filters)
        term = self._search_term
        search_columns = self.search_columns
        sorting = list(self._sorting)
        engine = self._engine
        columns = dict(self._columns)

        t0 = time.perf_counter()
        try:
            result = await self._processor.run("filter", FilterPayload(records, filters, engine))
            if result.stale or token != self._request_token:
                return
            result = await self._processor.run("search", SearchPayload(result.rows, term, search_columns, engine))
            if result.stale or token != self._request_token:
                return
            result = await self._processor.run("sort", SortPayload(result.rows, sorting, columns))
        except Exception:
            if token == self._request_token:
                self._pending = False
                self._pending_key = None
            logger.exception("[GridStore] offloaded recompute failed (token=%d)", token)
            raise
        if result.stale or token != self._request_token:
            logger.debug("[GridStore] discarded stale offloaded view token=%d", token)
            return

        elapsed_ms = (time.perf_counter() - t0) * 1000
        logger.debug(
            "[GridStore] recompute: rows=%d, matched=%d, elapsed=%.1fms (offloaded, token=%d)",
            len(records),
            len(result.rows),
            elapsed_ms,
            token,
        )
        self._apply_view(key, result.rows)

    def _apply_view(self, key: tuple[int, ...], rows: list[GridRow]) -> None:
        self._view = rows
        self._view_key = key
        self._pending = False
        self._pending_key = None
        # Row identities at each index changed; drop measured sizes.
        self._virtualizer.set_count(0)
        self._clamp_pagination()
        self._emit(EVENT_VIEW)

    def _clamp_pagination(self) -> None:
        self._pagination = self._pagination.clamp(len(self._view))

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._pending = False
        self._pending_key = None

    async def settle(self) -> None:
        """Wait until the newest offloaded recompute (if any) has been applied.

        Raises:
            Exception: Whatever the offloaded computation raised.
        """
        while self._task is not None:
            task = self._task
            await asyncio.wait({task})
            if task is self._task:
                self._task = None
                if not task.cancelled() and task.exception() is not None:
                    raise task.exception()  # type: ignore[misc]

    def flush(self) -> None:
        """Drop any offloaded recompute and derive the current view on this thread.

        For callers that read the view right away from inside a running
        event loop without awaiting :meth:`settle`.
        """
        if not self._pending:
            return
        self._cancel_task()
        key = self._derive_key()
        t0 = time.perf_counter()
        rows = self._compute_sync()
        logger.debug(
            "[GridStore] recompute: rows=%d, matched=%d, elapsed=%.1fms (flushed)",
            len(self._records),
            len(rows),
            (time.perf_counter() - t0) * 1000,
        )
        self._apply_view(key, rows)

    def close(self) -> None:
        """Tear down the grid: cancel pending work and release the processor."""
        self._cancel_task()
        if self._owns_processor:
            self._processor.close()
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def subscribe(self, listener: GridListener) -> Callable[[], None]:
        """Register ``listener(event, store)``.  Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: str) -> None:
        for listener in list(self._listeners):
            listener(event, self)

    # ------------------------------------------------------------------
    # Data and schema
    # ------------------------------------------------------------------

    def set_records(self, records: Iterable[Any]) -> None:
        """Replace the record collection; the whole view is recomputed."""
        self._set_records(records)
        known = {row.id for row in self._records}
        self._selection &= known
        if self._expanded_row_id not in known:
            self._expanded_row_id = None
        self._bump("data")
        self._recompute()

    def set_columns(self, columns: Iterable[ColumnSpec]) -> None:
        self._set_columns(columns)
        self._visibility = self._valid_visibility(self._visibility)
        self._bump("columns")
        self._recompute()

    # ------------------------------------------------------------------
    # Sorting
    # ------------------------------------------------------------------

    def set_sorting(self, sorting: Iterable[SortEntry | Mapping[str, Any] | tuple[str, bool]]) -> None:
        self._sorting = self._valid_sorting(normalize_sorting(sorting))
        self._pagination = self._pagination.first_page(len(self._view))
        self._bump("sorting")
        self._recompute()

    def toggle_sort(self, column_id: str, *, multi: bool = False) -> None:
        """Cycle *column_id* ascending -> descending -> ascending."""
        if not self._valid_sorting([SortEntry(column_id)]):
            return
        self.set_sorting(toggle_sort(self._sorting, column_id, multi=multi))

    def get_sort_direction(self, column_id: str) -> str | None:
        for entry in self._sorting:
            if entry.column_id == column_id:
                return "desc" if entry.descending else "asc"
        return None

    # ------------------------------------------------------------------
    # Filters and search
    # ------------------------------------------------------------------

    def set_filter(self, column_id: str, value: Any) -> None:
        """Set (or clear, with ``None``/``""``/``[]``) the filter on one column."""
        if not self._known_column(column_id):
            logger.debug("[GridStore] ignoring filter on unknown column %r", column_id)
            return
        if is_active_filter(value):
            self._filters[column_id] = normalize_filter_value(value)
        else:
            self._filters.pop(column_id, None)
        self._pagination = self._pagination.first_page(len(self._view))
        self._bump("filters")
        self._recompute()

    def set_filters(self, filters: Mapping[str, Any]) -> None:
        self._filters = self._normalize_filters(filters)
        self._pagination = self._pagination.first_page(len(self._view))
        self._bump("filters")
        self._recompute()

    def clear_filters(self) -> None:
        self.set_filters({})

    def get_filter_value(self, column_id: str) -> Any:
        value = self._filters.get(column_id)
        return None if value is None else filter_value_to_json(value)

    def set_search(self, term: str | None, columns: Sequence[str] | None = None) -> None:
        """Quick search: keep rows where any search column contains *term*."""
        self._search_term = term or ""
        if columns is not None:
            self._search_columns = [c for c in columns if self._known_column(c)]
        self._pagination = self._pagination.first_page(len(self._view))
        self._bump("search")
        self._recompute()

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    def set_pagination(self, pagination: PaginationState | Mapping[str, int]) -> None:
        if isinstance(pagination, Mapping):
            pagination = PaginationState(
                page_index=int(pagination.get("page", self._pagination.page_index)),
                page_size=int(pagination.get("pageSize", self._pagination.page_size)),
            )
        if pagination.page_size != self._pagination.page_size:
            pagination = PaginationState(page_index=0, page_size=pagination.page_size)
        self._pagination = pagination
        self._recompute()

    def set_page_index(self, page_index: int) -> None:
        self._pagination = self._pagination.set_page_index(page_index, len(self._view))
        self._recompute()

    def set_page_size(self, page_size: int) -> None:
        """Change the page size; pagination restarts at the first page."""
        self._pagination = self._pagination.set_page_size(page_size)
        self._recompute()

    def first_page(self) -> None:
        self._pagination = self._pagination.first_page(len(self._view))
        self._recompute()

    def previous_page(self) -> None:
        self._pagination = self._pagination.previous_page(len(self._view))
        self._recompute()

    def next_page(self) -> None:
        self._pagination = self._pagination.next_page(len(self._view))
        self._recompute()

    def last_page(self) -> None:
        self._pagination = self._pagination.last_page(len(self._view))
        self._recompute()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def set_selection(self, row_ids: Iterable[Any]) -> None:
        if not self.enable_row_selection:
            return
        known = {row.id for row in self._records}
        self._selection = {row_id for row_id in row_ids if row_id in known}
        self._emit(EVENT_SELECTION)

    def toggle_row_selected(self, row_id: Any, value: bool | None = None) -> None:
        """Toggle one row of the realized page.  Rows on other pages are ignored."""
        if not self.enable_row_selection:
            return
        if row_id not in {row.id for row in self.page_rows}:
            logger.debug("[GridStore] row %r is not on the current page", row_id)
            return
        selected = row_id not in self._selection if value is None else value
        if selected:
            self._selection.add(row_id)
        else:
            self._selection.discard(row_id)
        self._emit(EVENT_SELECTION)

    def toggle_page_selected(self, value: bool | None = None) -> None:
        """Select or deselect every row of the realized page."""
        if not self.enable_row_selection:
            return
        page_ids = {row.id for row in self.page_rows}
        selected = not self.is_page_selected if value is None else value
        if selected:
            self._selection |= page_ids
        else:
            self._selection -= page_ids
        self._emit(EVENT_SELECTION)

    def select_all_across_pages(self, value: bool = True) -> None:
        """Select or deselect the whole filtered set, not just the page."""
        if not self.enable_row_selection:
            return
        ids = {row.id for row in self._view}
        if value:
            self._selection |= ids
        else:
            self._selection -= ids
        self._emit(EVENT_SELECTION)

    def clear_selection(self) -> None:
        self._selection = set()
        self._emit(EVENT_SELECTION)

    def is_row_selected(self, row_id: Any) -> bool:
        return row_id in self._selection

    @property
    def is_page_selected(self) -> bool:
        page = self.page_rows
        return bool(page) and all(row.id in self._selection for row in page)

    @property
    def is_some_page_selected(self) -> bool:
        page = self.page_rows
        selected = sum(1 for row in page if row.id in self._selection)
        return 0 < selected < len(page)

    @property
    def selected_rows(self) -> list[GridRow]:
        return [row for row in self._records if row.id in self._selection]

    # ------------------------------------------------------------------
    # Column visibility
    # ------------------------------------------------------------------

    def set_column_visibility(self, visibility: Mapping[str, bool]) -> None:
        """Replace the visibility map.  Sort and filter state are untouched."""
        self._visibility = self._valid_visibility(visibility)
        self._emit(EVENT_VISIBILITY)

    def toggle_column_visibility(self, column_id: str, visible: bool | None = None) -> None:
        column = self._columns.get(column_id)
        if column is None:
            logger.debug("[GridStore] ignoring visibility of unknown column %r", column_id)
            return
        target = not self.is_column_visible(column_id) if visible is None else visible
        if not target and not column.hideable:
            return
        self._visibility[column_id] = target
        self._emit(EVENT_VISIBILITY)

    def show_all_columns(self) -> None:
        self._visibility = {}
        self._emit(EVENT_VISIBILITY)

    # ------------------------------------------------------------------
    # Compact mode
    # ------------------------------------------------------------------

    def set_viewport_width(self, width: float) -> bool:
        """Report the viewport width.  Returns True when compact mode flipped."""
        return self._responsive.update(width)

    def _on_compact_change(self, compact: bool) -> None:
        if compact:
            self._pre_compact_page_size = self._pagination.page_size
            self._pagination = self._pagination.set_page_size(self.config.compact_page_size)
        else:
            self._expanded_row_id = None
            if self.config.restore_page_size_on_expand and self._pre_compact_page_size:
                self._pagination = self._pagination.set_page_size(self._pre_compact_page_size)
            self._pre_compact_page_size = None
        self._emit(EVENT_COMPACT)
        self._recompute()

    def toggle_row_expanded(self, row_id: Any) -> None:
        """Open *row_id* in compact mode; opening another row closes the first."""
        self._expanded_row_id = None if self._expanded_row_id == row_id else row_id
        self._emit(EVENT_COMPACT)

    # ------------------------------------------------------------------
    # Reset and snapshots
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Restore the initial sort, filters, search, paging and visibility."""
        self._sorting = list(self._initial_sorting)
        self._filters = dict(self._initial_filters)
        self._search_term = ""
        self._search_columns = self._initial_search_columns
        page_size = self.config.compact_page_size if self.compact else self._initial_page_size
        self._pagination = PaginationState(page_index=0, page_size=page_size)
        self._selection = set()
        self._visibility = self._valid_visibility(self._initial_visibility)
        self._expanded_row_id = None
        self._bump("sorting", "filters", "search")
        self._emit(EVENT_SELECTION)
        self._emit(EVENT_VISIBILITY)
        self._recompute()

    def snapshot(self) -> dict[str, Any]:
        """JSON-serialisable copy of every state slice."""
        return {
            "sorting": [entry.to_dict() for entry in self._sorting],
            "filters": {column_id: filter_value_to_json(value) for column_id, value in self._filters.items()},
            "search": {"term": self._search_term, "columns": self._search_columns},
            "pagination": self._pagination.to_dict(),
            "selection": sorted(self._selection, key=str),
            "visibility": dict(self._visibility),
            "compact": self.compact,
            "width": self._responsive.width,
            "prePageSize": self._pre_compact_page_size,
            "expanded": self._expanded_row_id,
        }

    @classmethod
    def from_snapshot(
        cls,
        records: Iterable[Any],
        columns: Iterable[ColumnSpec],
        snapshot: Mapping[str, Any],
        **kwargs: Any,
    ) -> "GridStore":
        """Rebuild a store from :meth:`snapshot` output without re-running side effects."""
        store = cls(records, columns, **kwargs)
        store._sorting = store._valid_sorting(normalize_sorting(snapshot.get("sorting", [])))
        store._filters = store._normalize_filters(snapshot.get("filters", {}))
        search = snapshot.get("search") or {}
        store._search_term = search.get("term") or ""
        if search.get("columns") is not None:
            store._search_columns = list(search["columns"])
        page = snapshot.get("pagination") or {}
        store._pagination = PaginationState(
            page_index=int(page.get("page", 0)),
            page_size=int(page.get("pageSize", store._pagination.page_size)),
        )
        store._visibility = store._valid_visibility(snapshot.get("visibility", {}))
        store._responsive = ResponsiveModeSelector(
            store.config.compact_breakpoint,
            default=bool(snapshot.get("compact", False)),
        )
        if snapshot.get("width") is not None:
            store._responsive.update(snapshot["width"])
        store._responsive.subscribe(store._on_compact_change)
        store._pre_compact_page_size = snapshot.get("prePageSize")
        store._expanded_row_id = snapshot.get("expanded")
        store._bump("sorting", "filters", "search")
        store._recompute()
        known = {row.id for row in store._records}
        store._selection = {row_id for row_id in snapshot.get("selection", []) if row_id in known}
        return store
