"""Summary fields for rows collapsed in compact mode.

A compact row shows a title, an optional status tag and one line of
secondary values.  Tapping the row expands it to show the remaining
visible columns.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from reflex_datatable.models import ColumnSpec, GridRow, column_value, humanize_field_name

STATUS_FIELD: str = "status"
UNNAMED_TITLE: str = "Unnamed"


def select_summary_fields(
    visible_column_ids: Sequence[str],
    explicit: Sequence[str] | None = None,
    excluded: Iterable[str] = (),
    *,
    hideable: Mapping[str, bool] | None = None,
    minimum: int = 2,
    maximum: int = 3,
) -> list[str]:
    """Pick the columns that summarise a collapsed row.

    Args:
        visible_column_ids: Visible column ids in display order.
        explicit: Caller-chosen summary columns; returned verbatim.
        excluded: Ids never used as summary fields (e.g. the actions
            column).
        hideable: Optional ``{column_id: can_hide}`` map; columns that
            cannot be hidden are skipped.  Unknown ids count as hideable.
        minimum: Lower bound of the slice when enough columns exist.
        maximum: Upper bound of the slice.

    Returns:
        Column ids in display order.  The first one is the row's title.
    """
    if explicit is not None:
        return list(explicit)

    excluded_ids = set(excluded)
    hideable = hideable or {}
    candidates = [
        column_id
        for column_id in visible_column_ids
        if column_id not in excluded_ids and hideable.get(column_id, True)
    ]
    count = max(minimum, min(maximum, len(candidates)))
    return candidates[:count]


@dataclass(frozen=True)
class RowSummary:
    """Collapsed-row presentation data.

    Attributes:
        row_id: Id of the summarised row.
        title: Stringified value of the first summary field.
        status: Status tag text, when a ``status`` column is visible.
        details: Non-empty values of the remaining summary fields.
        expanded_fields: ``(column_id, header, value)`` for the visible
            columns shown only once the row is expanded.
    """

    row_id: Any
    title: str
    status: str | None
    details: tuple[str, ...]
    expanded_fields: tuple[tuple[str, str, str], ...]


def _display(value: Any) -> str:
    return "" if value is None else str(value)


def build_row_summary(
    row: GridRow,
    summary_ids: Sequence[str],
    columns: Mapping[str, ColumnSpec],
    visible_ids: Sequence[str],
    *,
    actions_column_id: str | None = None,
) -> RowSummary:
    """Lay out *row* for compact rendering."""
    record = row.record
    has_status = STATUS_FIELD in visible_ids

    title = _display(column_value(record, summary_ids[0], columns)) if summary_ids else ""
    status = _display(column_value(record, STATUS_FIELD, columns)) if has_status else ""

    details = tuple(
        text
        for text in (
            _display(column_value(record, column_id, columns))
            for column_id in summary_ids[1:]
            if not (has_status and column_id == STATUS_FIELD)
        )
        if text
    )

    expanded = []
    for column_id in visible_ids:
        if column_id in summary_ids or column_id == actions_column_id:
            continue
        if has_status and column_id == STATUS_FIELD:
            continue
        column = columns.get(column_id)
        header = column.title if column is not None else humanize_field_name(column_id)
        expanded.append((column_id, header, _display(column_value(record, column_id, columns))))

    return RowSummary(
        row_id=row.id,
        title=title or UNNAMED_TITLE,
        status=status or None,
        details=details,
        expanded_fields=tuple(expanded),
    )
