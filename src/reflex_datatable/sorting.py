"""Stable multi-key sorting and the sort toggle cycle.

The sort model is an ordered list of :class:`SortEntry`; the first entry
is the primary key and later entries only break ties.  ``None`` values
sort last when ascending and first when descending, so flipping a key's
direction mirrors the whole order.  Records that compare equal on every
key keep their input order (Python's sort is stable).
"""

from collections.abc import Iterable, Mapping, Sequence
from functools import cmp_to_key
from typing import Any

from reflex_datatable.models import ColumnSpec, GridRow, SortEntry, column_value


def compare_values(a: Any, b: Any) -> int:
    """Three-way compare with ``None`` greater than everything.

    Values that cannot be ordered against each other (e.g. ``3`` and
    ``"x"``) are compared by their string form instead of raising.
    """
    if a is None and b is None:
        return 0
    if a is None:
        return 1
    if b is None:
        return -1
    try:
        if a < b:
            return -1
        if a > b:
            return 1
        return 0
    except TypeError:
        sa, sb = str(a), str(b)
        return (sa > sb) - (sa < sb)


def normalize_sorting(sorting: Iterable[SortEntry | Mapping[str, Any] | tuple[str, bool]]) -> list[SortEntry]:
    """Accept entries as :class:`SortEntry`, ``{"id", "desc"}`` dicts or tuples.

    Duplicate column ids keep their first occurrence.
    """
    result: list[SortEntry] = []
    seen: set[str] = set()
    for entry in sorting:
        if isinstance(entry, SortEntry):
            normalized = entry
        elif isinstance(entry, Mapping):
            normalized = SortEntry.from_dict(entry)
        else:
            column_id, descending = entry
            normalized = SortEntry(column_id=column_id, descending=bool(descending))
        if normalized.column_id in seen:
            continue
        seen.add(normalized.column_id)
        result.append(normalized)
    return result


def sort_records(
    records: Sequence[Any],
    sorting: Sequence[SortEntry],
    columns: Mapping[str, ColumnSpec] | None = None,
) -> list[Any]:
    """Return *records* ordered by *sorting* (stable, never in place).

    Items may be raw records or :class:`GridRow` wrappers; wrappers are
    compared by their underlying record.
    """
    if not sorting:
        return list(records)

    keys = list(sorting)

    def value_of(item: Any, column_id: str) -> Any:
        record = item.record if isinstance(item, GridRow) else item
        return column_value(record, column_id, columns)

    def compare(a: Any, b: Any) -> int:
        for entry in keys:
            result = compare_values(value_of(a, entry.column_id), value_of(b, entry.column_id))
            if result:
                return -result if entry.descending else result
        return 0

    return sorted(records, key=cmp_to_key(compare))


def toggle_sort(
    sorting: Sequence[SortEntry],
    column_id: str,
    *,
    multi: bool = False,
) -> list[SortEntry]:
    """Advance *column_id* through ascending -> descending -> ascending.

    A column never returns to "unsorted" through toggling.  Without
    *multi* the toggled column becomes the only sort key; with *multi*
    it is flipped in place, or appended as the lowest-priority key.
    """
    current = next((entry for entry in sorting if entry.column_id == column_id), None)
    if current is None:
        toggled = SortEntry(column_id=column_id, descending=False)
        return [*sorting, toggled] if multi else [toggled]

    toggled = SortEntry(column_id=column_id, descending=not current.descending)
    if not multi:
        return [toggled]
    return [toggled if entry.column_id == column_id else entry for entry in sorting]
