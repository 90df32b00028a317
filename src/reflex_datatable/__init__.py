"""reflex-datatable – embeddable tabular-data grid engine with a Reflex state mixin.

The engine (:class:`GridStore` and its helpers) is plain Python and works
on any sequence of mapping or object records::

    pip install reflex-datatable

Load polars frames with :func:`records_from_frame` / :func:`scan_file` and
bind a grid to a Reflex app with :class:`DataTableStateMixin`.
"""

from reflex_datatable.actions import (
    ActionGroup,
    ActionItem,
    ActionSeparator,
    ResolvedAction,
    resolve_row_actions,
)
from reflex_datatable.config import GridConfig
from reflex_datatable.filters import (
    FilterEngine,
    NoFilter,
    Substring,
    ValueSet,
    filter_records,
    matches,
    normalize_filter_value,
    search_records,
)
from reflex_datatable.frames import column_specs_from_schema, records_from_frame, scan_file
from reflex_datatable.models import ColumnDef, ColumnSpec, GridRow, SortEntry
from reflex_datatable.offload import AsyncOffloadProcessor, Debouncer, OffloadResult
from reflex_datatable.pagination import PageFacts, PaginationState, compute_page_facts
from reflex_datatable.responsive import ResponsiveModeSelector
from reflex_datatable.search import SearchBox
from reflex_datatable.sorting import sort_records, toggle_sort
from reflex_datatable.state import DataTableStateMixin, build_store, publish_view
from reflex_datatable.store import GridStore
from reflex_datatable.summary import RowSummary, build_row_summary, select_summary_fields
from reflex_datatable.virtualizer import VirtualItem, Virtualizer, VirtualWindow
