"""CLI for reflex-datatable -- page through a data file in the terminal.

Usage::

    # First page of a CSV file
    reflex-datatable show data.csv

    # Sort, filter and page
    reflex-datatable show people.parquet --sort age:desc --filter status=active,pending --page 2

    # Quick search restricted to one column, compact layout
    reflex-datatable show people.csv --search ali --search-in name --width 400

The same :class:`~reflex_datatable.store.GridStore` that backs the Reflex
mixin computes the page, so the output matches what the grid shows.
"""

import logging
from pathlib import Path
from typing import Annotated, Any, Optional

import polars as pl
import typer

from reflex_datatable.config import GridConfig
from reflex_datatable.frames import column_specs_from_schema, records_from_frame, scan_file
from reflex_datatable.models import SortEntry
from reflex_datatable.store import GridStore

app = typer.Typer(
    name="reflex-datatable",
    help="Sort, filter, search and page through tabular data files.",
    no_args_is_help=True,
)

_MAX_CELL_WIDTH: int = 40


@app.callback()
def _root(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log recompute timings")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Option parsing
# ---------------------------------------------------------------------------

def parse_sort(specs: list[str]) -> list[SortEntry]:
    """Parse ``col`` / ``col:asc`` / ``col:desc`` entries, in priority order.

    Raises:
        typer.BadParameter: For an unknown direction.
    """
    entries: list[SortEntry] = []
    for spec in specs:
        column_id, _, direction = spec.partition(":")
        direction = direction.lower() or "asc"
        if direction not in ("asc", "desc"):
            raise typer.BadParameter(f"sort direction must be 'asc' or 'desc', got {direction!r}")
        entries.append(SortEntry(column_id=column_id, descending=direction == "desc"))
    return entries


def _coerce_for_dtype(value: str, dtype: pl.DataType | None) -> Any:
    """Convert a command-line value to the column's Python type."""
    if dtype is None:
        return value
    if isinstance(dtype, pl.Boolean):
        return value.lower() in ("1", "true", "yes")
    if dtype.is_integer():
        try:
            return int(value)
        except ValueError:
            return value
    if dtype.is_float():
        try:
            return float(value)
        except ValueError:
            return value
    return value


def parse_filters(specs: list[str], schema: pl.Schema | dict[str, pl.DataType]) -> dict[str, Any]:
    """Parse ``col=v1,v2`` (value set) and ``col~text`` (substring) filters.

    Raises:
        typer.BadParameter: When neither ``=`` nor ``~`` is present.
    """
    filters: dict[str, Any] = {}
    for spec in specs:
        eq, tilde = spec.find("="), spec.find("~")
        if tilde != -1 and (eq == -1 or tilde < eq):
            column_id, text = spec[:tilde], spec[tilde + 1:]
            filters[column_id] = text
        elif eq != -1:
            column_id, raw = spec[:eq], spec[eq + 1:]
            dtype = schema.get(column_id)
            filters[column_id] = [_coerce_for_dtype(v, dtype) for v in raw.split(",") if v != ""]
        else:
            raise typer.BadParameter(f"filter must look like col=v1,v2 or col~text, got {spec!r}")
    return filters


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def _cell(value: Any) -> str:
    text = "" if value is None else str(value)
    if len(text) > _MAX_CELL_WIDTH:
        text = text[: _MAX_CELL_WIDTH - 3] + "..."
    return text


def render_table(store: GridStore) -> list[str]:
    """Lay out the realized page as aligned text lines."""
    columns = {column.id: column for column in store.columns}
    visible = store.visible_column_ids
    headers = []
    for column_id in visible:
        marker = {"asc": " ^", "desc": " v"}.get(store.get_sort_direction(column_id) or "", "")
        headers.append(columns[column_id].title + marker)

    body = [[_cell(columns[c].value(row.record)) for c in visible] for row in store.page_rows]
    widths = [
        max([len(header)] + [len(line[i]) for line in body])
        for i, header in enumerate(headers)
    ]

    def fmt(cells: list[str]) -> str:
        return "  ".join(cell.ljust(width) for cell, width in zip(cells, widths)).rstrip()

    lines = [fmt(headers), fmt(["-" * w for w in widths])]
    lines.extend(fmt(line) for line in body)
    return lines


def render_compact(store: GridStore) -> list[str]:
    """One block per row: title, status tag and the summary details."""
    lines: list[str] = []
    for summary in store.row_summaries():
        head = summary.title
        if summary.status:
            head += f" [{summary.status}]"
        lines.append(head)
        if summary.details:
            lines.append("  " + " · ".join(summary.details))
    return lines


def render_footer(store: GridStore) -> str:
    facts = store.page_facts
    start = facts.start_item if store.total_rows else 0
    return (
        f"{start}-{facts.end_item} of {store.total_rows:,} "
        f"(page {facts.current_page}/{facts.total_pages})"
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command()
def show(
    file: Annotated[Path, typer.Argument(help="Path to the data file (CSV, TSV, Parquet, JSON, NDJSON, IPC)")],
    sort: Annotated[Optional[list[str]], typer.Option("--sort", "-s", help="Sort key col[:asc|desc]; repeat for multi-sort")] = None,
    filter_: Annotated[Optional[list[str]], typer.Option("--filter", "-f", help="col=v1,v2 or col~text; repeatable")] = None,
    search: Annotated[Optional[str], typer.Option("--search", "-q", help="Quick search term")] = None,
    search_in: Annotated[Optional[list[str]], typer.Option("--search-in", help="Column searched by --search; repeatable")] = None,
    page: Annotated[int, typer.Option("--page", "-p", help="1-based page number")] = 1,
    page_size: Annotated[Optional[int], typer.Option("--page-size", help="Rows per page")] = None,
    width: Annotated[Optional[int], typer.Option("--width", "-w", help="Viewport width in px; narrow widths use the compact layout")] = None,
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", help="Maximum number of rows to load")] = None,
) -> None:
    """Print one page of a data file after sorting, filtering and search."""
    try:
        lf = scan_file(file)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)

    schema = lf.collect_schema()
    records, id_field = records_from_frame(lf, limit=limit)
    columns = column_specs_from_schema(schema, id_field=id_field)
    known = {column.id for column in columns}

    sorting = parse_sort(sort or [])
    filters = parse_filters(filter_ or [], schema)
    for column_id in [e.column_id for e in sorting] + list(filters) + list(search_in or []):
        if column_id not in known:
            typer.echo(f"Error: unknown column {column_id!r}", err=True)
            raise typer.Exit(code=1)

    store = GridStore(
        records,
        columns,
        config=GridConfig(),
        id_field=id_field,
        initial_sorting=sorting,
        initial_filters=filters,
        initial_page_size=page_size,
    )
    try:
        if width is not None:
            store.set_viewport_width(width)
        if page_size is not None and store.compact:
            store.set_page_size(page_size)
        if search:
            store.set_search(search, search_in or None)
        store.set_page_index(max(0, page - 1))

        lines = render_compact(store) if store.compact else render_table(store)
        for line in lines:
            typer.echo(line)
        typer.echo(render_footer(store))
    finally:
        store.close()


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
