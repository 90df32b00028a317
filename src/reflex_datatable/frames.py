"""Utilities for turning polars frames into grid records and column specs."""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import polars as pl

from reflex_datatable.models import ROW_ID_FIELD, ColumnSpec, humanize_field_name


def _is_sortable_dtype(dtype: pl.DataType) -> bool:
    """Nested values have no natural order in the grid."""
    return not isinstance(dtype, (pl.List, pl.Array, pl.Struct))


def records_from_frame(
    data: pl.LazyFrame | pl.DataFrame,
    *,
    id_field: str | None = None,
    limit: int | None = None,
) -> tuple[list[dict[str, Any]], str]:
    """Collect a polars frame into JSON-safe dict records.

    Args:
        data: The frame to convert.  LazyFrames are collected.
        id_field: Column that serves as the unique row identifier.  If
            ``None`` and there is no ``"id"`` column with unique values, a
            ``"__row_id__"`` column is added with a zero-based row index.
        limit: Optional maximum number of rows to collect.

    Returns:
        A ``(records, id_field)`` tuple.  *id_field* is the column the
        grid store should use as row id.
    """
    if isinstance(data, pl.LazyFrame):
        if limit is not None:
            data = data.head(limit)
        df = data.collect()
    else:
        df = data.head(limit) if limit is not None else data

    # An "id" column is only trusted when it is actually unique; data files
    # often carry a placeholder id column filled with "." or nulls.
    effective_id_field = id_field
    if effective_id_field is None:
        if "id" in df.columns and df["id"].n_unique() == df.height:
            effective_id_field = "id"
        else:
            df = df.with_row_index(ROW_ID_FIELD)
            effective_id_field = ROW_ID_FIELD

    return _dataframe_to_dicts(df), effective_id_field


def column_specs_from_schema(
    schema: Mapping[str, pl.DataType],
    *,
    id_field: str | None = None,
    show_id_field: bool = False,
    headers: Mapping[str, str] | None = None,
    widths: Mapping[str, int] | None = None,
) -> list[ColumnSpec]:
    """Build :class:`ColumnSpec` objects from a polars schema.

    Args:
        schema: Column name to dtype mapping, e.g. ``df.schema`` or
            ``lf.collect_schema()``.
        id_field: Name of the row-id column.
        show_id_field: Whether to include the row-id column.
        headers: Optional display names that override the humanised
            column names.
        widths: Optional pixel widths per column.

    Returns:
        One spec per column, in schema order.  The row-id column, when
        shown, cannot be hidden.
    """
    headers = headers or {}
    widths = widths or {}
    specs: list[ColumnSpec] = []
    for name, dtype in schema.items():
        is_id = name in (id_field, ROW_ID_FIELD)
        if is_id and not show_id_field:
            continue
        specs.append(
            ColumnSpec(
                id=name,
                header=headers.get(name, humanize_field_name(name)),
                size=widths.get(name),
                sortable=_is_sortable_dtype(dtype),
                hideable=not is_id,
            )
        )
    return specs


def scan_file(path: str | Path) -> pl.LazyFrame:
    """Scan a data file into a LazyFrame, choosing the reader by extension.

    * ``.parquet`` / ``.pq`` -- ``pl.scan_parquet()``.
    * ``.csv`` -- ``pl.scan_csv()``.
    * ``.tsv`` -- ``pl.scan_csv(separator="\\t")``.
    * ``.json`` -- ``pl.read_json().lazy()`` (no streaming scan).
    * ``.ndjson`` / ``.jsonl`` -- ``pl.scan_ndjson()``.
    * ``.ipc`` / ``.arrow`` / ``.feather`` -- ``pl.scan_ipc()``.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ValueError: If the file extension is not recognised.
    """
    path = Path(path).resolve()
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    suffix = path.suffix.lower()

    if suffix in (".parquet", ".pq"):
        return pl.scan_parquet(path)
    if suffix == ".csv":
        return pl.scan_csv(path)
    if suffix == ".tsv":
        return pl.scan_csv(path, separator="\t")
    if suffix == ".json":
        return pl.read_json(path).lazy()
    if suffix in (".ndjson", ".jsonl"):
        return pl.scan_ndjson(path)
    if suffix in (".ipc", ".arrow", ".feather"):
        return pl.scan_ipc(path)

    raise ValueError(
        f"Unsupported file extension: {suffix!r}. "
        "Supported: .parquet, .pq, .csv, .tsv, .json, .ndjson, .jsonl, "
        ".ipc, .arrow, .feather"
    )


def _dataframe_to_dicts(df: pl.DataFrame) -> list[dict[str, Any]]:
    """Convert a DataFrame to a list of JSON-safe dicts.

    Temporal columns become ISO-8601 strings, list/array columns become
    comma-joined strings and struct columns are cast to String.  Other
    types already come back as Python-native scalars from ``to_dicts()``.
    """
    exprs: list[pl.Expr] = []
    needs_cast = False
    for name, dtype in df.schema.items():
        if isinstance(dtype, (pl.Date, pl.Datetime, pl.Time, pl.Duration, pl.Struct)):
            exprs.append(pl.col(name).cast(pl.String))
            needs_cast = True
        elif isinstance(dtype, (pl.List, pl.Array)):
            exprs.append(pl.col(name).cast(pl.List(pl.String)).list.join(","))
            needs_cast = True
        else:
            exprs.append(pl.col(name))

    if not needs_cast:
        return df.to_dicts()
    return df.select(exprs).to_dicts()
