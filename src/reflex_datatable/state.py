"""Reflex state mixin that drives a :class:`GridStore` from UI events.

Users inherit from :class:`DataTableStateMixin` **and** ``rx.State``,
load records with :meth:`DataTableStateMixin.set_dt_records` (or
:meth:`DataTableStateMixin.set_dt_frame` for polars frames) and bind the
``dt_*`` vars and ``handle_dt_*`` handlers to their own components.

Reflex state must stay serialisable, so the store is not kept between
events.  Records, column declarations and a JSON snapshot of the grid
state live in backend-only vars; every handler rebuilds the store with
:func:`build_store`, applies one mutation and publishes the new view
with :func:`publish_view`.

Typical usage::

    from reflex_datatable import DataTableStateMixin, scan_file

    class MyState(DataTableStateMixin, rx.State):
        def load_data(self):
            yield from self.set_dt_frame(scan_file("people.csv"))
"""

import logging
import time
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import polars as pl
import reflex as rx

from reflex_datatable.config import GridConfig
from reflex_datatable.frames import column_specs_from_schema, records_from_frame
from reflex_datatable.models import ROW_ID_FIELD, ColumnSpec
from reflex_datatable.store import GridStore

logger = logging.getLogger(__name__)

_DEFAULT_PAGINATION: dict[str, int] = {"page": 0, "pageSize": 10}
_DEFAULT_PAGE_FACTS: dict[str, int] = {"startItem": 1, "endItem": 0, "currentPage": 1, "totalPages": 1}


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def column_spec_to_dict(spec: ColumnSpec) -> dict[str, Any]:
    """Serialisable form of a field-based column spec.

    ``accessor`` and ``filter_fn`` are callables and cannot be stored in
    Reflex state; columns held by the mixin always read ``record[id]``.
    """
    return {
        "id": spec.id,
        "header": spec.header,
        "size": spec.size,
        "sortable": spec.sortable,
        "hideable": spec.hideable,
    }


def column_spec_from_dict(data: Mapping[str, Any]) -> ColumnSpec:
    return ColumnSpec(
        id=str(data["id"]),
        header=data.get("header"),
        size=data.get("size"),
        sortable=bool(data.get("sortable", True)),
        hideable=bool(data.get("hideable", True)),
    )


def build_store(
    records: Sequence[Mapping[str, Any]],
    columns: Iterable[Mapping[str, Any] | ColumnSpec],
    snapshot: Mapping[str, Any] | None = None,
    *,
    id_field: str = "id",
    config: GridConfig | None = None,
) -> GridStore:
    """Rebuild a store from the serialisable pieces kept in Reflex state.

    Handlers run inside the Reflex event loop, so a large dataset would
    otherwise start with an offloaded (still empty) view.  The rebuilt view
    is derived synchronously; only the handler's own mutation is offloaded.
    """
    specs = [c if isinstance(c, ColumnSpec) else column_spec_from_dict(c) for c in columns]
    if not snapshot:
        store = GridStore(records, specs, id_field=id_field, config=config)
    else:
        store = GridStore.from_snapshot(records, specs, snapshot, id_field=id_field, config=config)
    store.flush()
    return store


def _row_payload(row_id: Any, record: Mapping[str, Any]) -> dict[str, Any]:
    payload = dict(record)
    payload.setdefault(ROW_ID_FIELD, row_id)
    return payload


def publish_view(store: GridStore) -> dict[str, Any]:
    """Compute every published ``dt_*`` var (plus the new snapshot) for *store*."""
    facts = store.page_facts
    visible = set(store.visible_column_ids)
    summaries = [
        {
            "rowId": summary.row_id,
            "title": summary.title,
            "status": summary.status,
            "details": list(summary.details),
            "expanded": [
                {"field": field, "header": header, "value": value}
                for field, header, value in summary.expanded_fields
            ],
        }
        for summary in store.row_summaries()
    ] if store.compact else []

    return {
        "dt_rows": [_row_payload(row.id, row.record) for row in store.page_rows],
        "dt_columns": [
            spec.to_column_def(hidden=spec.id not in visible).dict() for spec in store.columns
        ],
        "dt_row_count": store.total_rows,
        "dt_page_facts": facts.to_dict(),
        "dt_pagination_model": store.pagination.to_dict(),
        "dt_page_sizes": list(store.config.page_sizes),
        "dt_sort_model": [entry.to_dict() for entry in store.sorting],
        "dt_filter_model": {
            column_id: store.get_filter_value(column_id) for column_id in store.filters
        },
        "dt_search": store.search_term,
        "dt_selection": sorted(store.selection, key=str),
        "dt_page_selected": store.is_page_selected,
        "dt_some_page_selected": store.is_some_page_selected,
        "dt_visibility": store.column_visibility,
        "dt_compact": store.compact,
        "dt_summary_fields": store.summary_fields,
        "dt_summaries": summaries,
        "dt_expanded_row": store.expanded_row_id,
        "dt_stats": (
            f"{facts.start_item if store.total_rows else 0}-{facts.end_item} "
            f"of {store.total_rows:,}"
        ),
        "_dt_snapshot": store.snapshot(),
    }


# ---------------------------------------------------------------------------
# Mixin
# ---------------------------------------------------------------------------

class DataTableStateMixin(rx.State, mixin=True):
    """Reflex State mixin exposing one client-side data grid.

    This is a Reflex **mixin** (``mixin=True``): the vars declared here
    are injected into each concrete subclass, so several grids on the
    same page keep independent state.  Subclasses **must** also inherit
    from ``rx.State``::

        class PeopleGrid(DataTableStateMixin, rx.State):
            ...

    Override :meth:`_dt_config` to change page sizes, thresholds or the
    compact breakpoint.  All var names are prefixed with ``dt_``.
    """

    # -- Frontend state vars --
    dt_rows: list[dict[str, Any]] = []
    dt_columns: list[dict[str, Any]] = []
    dt_row_count: int = 0
    dt_page_facts: dict[str, int] = _DEFAULT_PAGE_FACTS
    dt_pagination_model: dict[str, int] = _DEFAULT_PAGINATION
    dt_page_sizes: list[int] = [5, 10, 25, 50]
    dt_sort_model: list[dict[str, Any]] = []
    dt_filter_model: dict[str, Any] = {}
    dt_search: str = ""
    dt_selection: list[Any] = []
    dt_page_selected: bool = False
    dt_some_page_selected: bool = False
    dt_visibility: dict[str, bool] = {}
    dt_compact: bool = False
    dt_summary_fields: list[str] = []
    dt_summaries: list[dict[str, Any]] = []
    dt_expanded_row: Any = None
    dt_loading: bool = False
    dt_loaded: bool = False
    dt_stats: str = ""

    # -- Backend-only vars (not sent to frontend) --
    _dt_records: list[dict[str, Any]] = []
    _dt_column_specs: list[dict[str, Any]] = []
    _dt_snapshot: dict[str, Any] = {}
    _dt_id_field: str = "id"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def _dt_config(self) -> GridConfig:
        return GridConfig()

    def set_dt_records(
        self,
        records: Sequence[Mapping[str, Any]],
        columns: Iterable[ColumnSpec] | None = None,
        *,
        id_field: str = "id",
    ) -> None:
        """Load *records* and reset every grid state slice.

        Args:
            records: Dict records.  Each needs a unique *id_field* value
                or is identified by its position.
            columns: Column specs; inferred from the first record's keys
                when omitted.
            id_field: Record field used as the row id.
        """
        records = [dict(r) for r in records]
        if columns is None:
            keys = list(records[0]) if records else []
            columns = [ColumnSpec(key, hideable=key != id_field) for key in keys if key != ROW_ID_FIELD]
        self._dt_records = records  # type: ignore[assignment]
        self._dt_column_specs = [column_spec_to_dict(c) for c in columns]  # type: ignore[assignment]
        self._dt_id_field = id_field  # type: ignore[assignment]
        self._dt_snapshot = {}  # type: ignore[assignment]
        store = self._dt_store()
        self._dt_publish(store, "load")
        self.dt_loaded = True  # type: ignore[assignment]

    def set_dt_frame(self, data: pl.LazyFrame | pl.DataFrame, *, limit: int | None = None):
        """Collect a polars frame and load it.

        This is a **generator** -- use ``yield from self.set_dt_frame(...)``
        so the loading state reaches the frontend before the collect.
        """
        self.dt_loading = True  # type: ignore[assignment]
        self.dt_stats = "Loading..."  # type: ignore[assignment]
        yield

        records, id_field = records_from_frame(data, limit=limit)
        schema = data.collect_schema() if isinstance(data, pl.LazyFrame) else data.schema
        specs = column_specs_from_schema(schema, id_field=id_field)
        self.set_dt_records(records, specs, id_field=id_field)
        self.dt_loading = False  # type: ignore[assignment]

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    async def handle_dt_sort(self, column_id: str, multi: bool = False):
        """Header click: cycle *column_id* ascending/descending."""
        self.dt_loading = True  # type: ignore[assignment]
        self.dt_stats = "Sorting..."  # type: ignore[assignment]
        yield
        store = self._dt_store()
        store.toggle_sort(column_id, multi=multi)
        await self._dt_settle_and_publish(store, "sort")

    async def handle_dt_filter(self, column_id: str, value: Any):
        """Set or clear (``None``/``""``/``[]``) one column filter."""
        self.dt_loading = True  # type: ignore[assignment]
        self.dt_stats = "Filtering..."  # type: ignore[assignment]
        yield
        store = self._dt_store()
        store.set_filter(column_id, value)
        await self._dt_settle_and_publish(store, "filter")

    async def handle_dt_search(self, term: str):
        """Quick search across every column.  Debounce on the input side."""
        self.dt_loading = True  # type: ignore[assignment]
        self.dt_stats = "Searching..."  # type: ignore[assignment]
        yield
        store = self._dt_store()
        store.set_search(term)
        await self._dt_settle_and_publish(store, "search")

    async def clear_dt_filters(self):
        """Drop every column filter and the search term."""
        self.dt_loading = True  # type: ignore[assignment]
        self.dt_stats = "Clearing filters..."  # type: ignore[assignment]
        yield
        store = self._dt_store()
        store.clear_filters()
        store.set_search("")
        await self._dt_settle_and_publish(store, "clear")

    def handle_dt_page(self, page: int) -> None:
        store = self._dt_store()
        store.set_page_index(int(page))
        self._dt_publish(store, "page")

    def handle_dt_page_size(self, page_size: int | str) -> None:
        store = self._dt_store()
        store.set_page_size(int(page_size))
        self._dt_publish(store, "page_size")

    def handle_dt_select(self, row_id: Any) -> None:
        store = self._dt_store()
        store.toggle_row_selected(row_id)
        self._dt_publish(store, "select")

    def handle_dt_select_page(self, value: bool) -> None:
        store = self._dt_store()
        store.toggle_page_selected(bool(value))
        self._dt_publish(store, "select_page")

    def handle_dt_visibility(self, column_id: str, visible: bool) -> None:
        store = self._dt_store()
        store.toggle_column_visibility(column_id, bool(visible))
        self._dt_publish(store, "visibility")

    def handle_dt_viewport(self, width: float) -> None:
        """Report the viewport width; may switch compact mode."""
        store = self._dt_store()
        store.set_viewport_width(float(width))
        self._dt_publish(store, "viewport")

    def handle_dt_expand(self, row_id: Any) -> None:
        store = self._dt_store()
        store.toggle_row_expanded(row_id)
        self._dt_publish(store, "expand")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _dt_store(self) -> GridStore:
        return build_store(
            self._dt_records,
            self._dt_column_specs,
            self._dt_snapshot,
            id_field=self._dt_id_field,
            config=self._dt_config(),
        )

    async def _dt_settle_and_publish(self, store: GridStore, action: str) -> None:
        await store.settle()
        self._dt_publish(store, action)

    def _dt_publish(self, store: GridStore, action: str) -> None:
        t0 = time.perf_counter()
        for name, value in publish_view(store).items():
            setattr(self, name, value)
        store.close()
        self.dt_loading = False  # type: ignore[assignment]
        logger.debug(
            "[DataTable] %s: rows=%d, page=%d, elapsed=%.1fms",
            action,
            self.dt_row_count,
            self.dt_pagination_model.get("page", 0),
            (time.perf_counter() - t0) * 1000,
        )
