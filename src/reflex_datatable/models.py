"""Column, row and sort models shared by the grid engine."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from reflex.components.props import PropsBase

ROW_ID_FIELD: str = "__row_id__"


def humanize_field_name(field: str) -> str:
    """Convert a snake_case or raw field name to a human-friendly header.

    Examples:
        ``"first_name"`` -> ``"First Name"``
        ``"age"`` -> ``"Age"``
        ``"__row_id__"`` -> ``"Row Id"``
    """
    return field.strip("_").replace("_", " ").title()


@dataclass(frozen=True)
class ColumnSpec:
    """Declarative description of one grid column.

    Attributes:
        id: Column identifier, unique within a grid.  Also the record
            field read when no *accessor* is given.
        accessor: Optional callable ``record -> value``.
        header: Display name; defaults to the humanised *id*.
        size: Display width hint in pixels.
        sortable: Whether the column takes part in sorting.
        hideable: Whether the user may hide the column.
        filter_fn: Optional predicate ``(record, column_id, filter_value)
            -> bool`` that replaces the built-in filter semantics.
    """

    id: str
    accessor: Callable[[Any], Any] | None = None
    header: str | None = None
    size: int | None = None
    sortable: bool = True
    hideable: bool = True
    filter_fn: Callable[[Any, str, Any], bool] | None = None

    @property
    def title(self) -> str:
        return self.header if self.header is not None else humanize_field_name(self.id)

    def value(self, record: Any) -> Any:
        """Read this column's value from *record*; missing fields give ``None``."""
        if self.accessor is not None:
            return self.accessor(record)
        return get_field(record, self.id)

    def to_column_def(self, *, hidden: bool = False) -> "ColumnDef":
        return ColumnDef(
            field=self.id,
            header_name=self.title,
            width=self.size,
            sortable=self.sortable,
            hideable=self.hideable,
            hide=hidden,
        )


def get_field(record: Any, name: str) -> Any:
    """Named field access for mappings and plain objects."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def column_value(record: Any, column_id: str, columns: Mapping[str, ColumnSpec] | None = None) -> Any:
    """Read *column_id* from *record*, honouring the column's accessor if known."""
    if columns is not None:
        column = columns.get(column_id)
        if column is not None:
            return column.value(record)
    return get_field(record, column_id)


@dataclass(frozen=True)
class GridRow:
    """A record as seen by the grid: stable id, input position, payload."""

    id: Any
    index: int
    record: Any


@dataclass(frozen=True)
class SortEntry:
    """One sort key.  Position in the sort list is its priority."""

    column_id: str
    descending: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.column_id, "desc": self.descending}

    @classmethod
    def from_dict(cls, entry: Mapping[str, Any]) -> "SortEntry":
        return cls(column_id=str(entry["id"]), descending=bool(entry.get("desc", False)))


class ColumnDef(PropsBase):
    """Column definition published to the front end.

    Attributes are automatically converted from snake_case to camelCase
    when serialized to JavaScript props via PropsBase.
    """

    field: str
    header_name: str | None = None
    width: int | None = None
    sortable: bool = True
    hideable: bool = True
    hide: bool = False
