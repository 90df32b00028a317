"""Filter predicates and quick search over in-memory records.

Filter values arrive loosely typed from the front end (a list of allowed
values, a search string, or something unexpected).  They are normalised
into a small tagged variant before evaluation:

* :class:`ValueSet` -- the record's field must equal one of the values.
* :class:`Substring` -- the stringified field must contain the text,
  case-insensitively.
* :class:`NoFilter` -- no constraint.  Unknown value types land here on
  purpose so a malformed filter can never make the grid unusable.

A record passes a column filter map iff it passes **every** active
filter (AND).  Quick search is the opposite: a record passes iff **any**
searched column contains the term (OR).
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from reflex_datatable.models import ColumnSpec, GridRow, column_value

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Filter value variant
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NoFilter:
    """No constraint.  *raw* keeps the caller's original value, if any."""

    raw: Any = field(default=None, compare=False)

    @property
    def is_empty(self) -> bool:
        return True


@dataclass(frozen=True)
class ValueSet:
    """Array semantics: membership by exact equality."""

    values: tuple[Any, ...] = ()
    raw: Any = field(default=None, compare=False)

    @property
    def is_empty(self) -> bool:
        return not self.values


@dataclass(frozen=True)
class Substring:
    """String semantics: case-folded containment."""

    text: str = ""
    raw: Any = field(default=None, compare=False)

    @property
    def is_empty(self) -> bool:
        return self.text == ""


FilterValue = NoFilter | ValueSet | Substring


def normalize_filter_value(value: Any) -> FilterValue:
    """Turn a raw filter value into a :data:`FilterValue`.

    ``list``/``tuple``/``set``/``frozenset`` become :class:`ValueSet`,
    ``str`` becomes :class:`Substring`, already-normalised values pass
    through, and everything else becomes :class:`NoFilter`.
    """
    if isinstance(value, (NoFilter, ValueSet, Substring)):
        return value
    if isinstance(value, (list, tuple)):
        return ValueSet(values=tuple(value), raw=value)
    if isinstance(value, (set, frozenset)):
        return ValueSet(values=tuple(value), raw=value)
    if isinstance(value, str):
        return Substring(text=value, raw=value)
    return NoFilter(raw=value)


def is_active_filter(value: Any) -> bool:
    """Return False for values that mean "no constraint" (``None``, ``""``, ``[]``)."""
    if value is None:
        return False
    if isinstance(value, NoFilter):
        return value.raw is not None
    if isinstance(value, (ValueSet, Substring)):
        return not value.is_empty
    if isinstance(value, (str, list, tuple, set, frozenset)):
        return len(value) > 0
    return True


def filter_value_to_json(value: FilterValue) -> Any:
    """Serialise a filter value for snapshots (inverse of :func:`normalize_filter_value`)."""
    if isinstance(value, ValueSet):
        return list(value.values)
    if isinstance(value, Substring):
        return value.text
    return value.raw


def _record(item: Any) -> Any:
    return item.record if isinstance(item, GridRow) else item


def _casefold(value: Any) -> str:
    return str(value).casefold()


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class FilterEngine:
    """Evaluates column filters and quick search for one grid.

    Args:
        columns: Column specs keyed by id.  Used for accessors and
            per-column ``filter_fn`` overrides.  Unknown column ids fall
            back to plain field access.
        debug: Log a warning (once per column and value type) whenever a
            filter value degrades to "no constraint".
    """

    def __init__(
        self,
        columns: Mapping[str, ColumnSpec] | Iterable[ColumnSpec] | None = None,
        *,
        debug: bool = False,
    ) -> None:
        if columns is None:
            columns = {}
        elif not isinstance(columns, Mapping):
            columns = {c.id: c for c in columns}
        self.columns: Mapping[str, ColumnSpec] = columns
        self.debug = debug
        self._warned: set[tuple[str, str]] = set()

    def matches(self, record: Any, column_id: str, filter_value: Any) -> bool:
        """Return whether *record* passes the filter on *column_id*."""
        record = _record(record)
        value = normalize_filter_value(filter_value)

        column = self.columns.get(column_id)
        if column is not None and column.filter_fn is not None:
            raw = value.raw if value.raw is not None else filter_value_to_json(value)
            return bool(column.filter_fn(record, column_id, raw))

        if isinstance(value, ValueSet):
            if not value.values:
                return True
            return column_value(record, column_id, self.columns) in value.values

        if isinstance(value, Substring):
            if not value.text:
                return True
            field_value = column_value(record, column_id, self.columns)
            if field_value is None:
                return False
            return _casefold(value.text) in _casefold(field_value)

        if value.raw is not None:
            self._warn_unconstrained(column_id, value.raw)
        return True

    def filter_records(self, records: Sequence[Any], filters: Mapping[str, Any]) -> list[Any]:
        """Keep the records that match every active filter in *filters*."""
        active = [
            (column_id, normalize_filter_value(value))
            for column_id, value in filters.items()
            if is_active_filter(value)
        ]
        if not active:
            return list(records)
        return [
            item
            for item in records
            if all(self.matches(item, column_id, value) for column_id, value in active)
        ]

    def search_records(
        self,
        records: Sequence[Any],
        term: str | None,
        column_ids: Sequence[str],
    ) -> list[Any]:
        """Keep the records where any of *column_ids* contains *term*."""
        if not term or not column_ids:
            return list(records)
        needle = _casefold(term)
        result: list[Any] = []
        for item in records:
            record = _record(item)
            for column_id in column_ids:
                field_value = column_value(record, column_id, self.columns)
                if field_value is not None and needle in _casefold(field_value):
                    result.append(item)
                    break
        return result

    def facet_values(self, records: Sequence[Any], column_id: str) -> list[Any]:
        """Sorted distinct non-null values of a column, for value-set pickers."""
        seen: list[Any] = []
        hashed: set[Any] = set()
        for item in records:
            field_value = column_value(_record(item), column_id, self.columns)
            if field_value is None:
                continue
            try:
                if field_value in hashed:
                    continue
                hashed.add(field_value)
            except TypeError:
                if field_value in seen:
                    continue
            seen.append(field_value)
        try:
            return sorted(seen)
        except TypeError:
            return sorted(seen, key=str)

    def _warn_unconstrained(self, column_id: str, raw: Any) -> None:
        if not self.debug:
            return
        key = (column_id, type(raw).__name__)
        if key in self._warned:
            return
        self._warned.add(key)
        logger.warning(
            "[FilterEngine] filter on %r has unsupported value type %s; "
            "treating it as no constraint",
            column_id,
            type(raw).__name__,
        )


# ---------------------------------------------------------------------------
# Functional shortcuts
# ---------------------------------------------------------------------------

def matches(record: Any, column_id: str, filter_value: Any, column: ColumnSpec | None = None) -> bool:
    """Evaluate one column filter against one record."""
    engine = FilterEngine([column] if column is not None else None)
    return engine.matches(record, column_id, filter_value)


def filter_records(
    records: Sequence[Any],
    filters: Mapping[str, Any],
    columns: Mapping[str, ColumnSpec] | Iterable[ColumnSpec] | None = None,
) -> list[Any]:
    """AND all active *filters* over *records*."""
    return FilterEngine(columns).filter_records(records, filters)


def search_records(
    records: Sequence[Any],
    term: str | None,
    column_ids: Sequence[str],
    columns: Mapping[str, ColumnSpec] | Iterable[ColumnSpec] | None = None,
) -> list[Any]:
    """OR *term* across *column_ids* over *records*."""
    return FilterEngine(columns).search_records(records, term, column_ids)
