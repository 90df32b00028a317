"""Tests for polars frame ingestion."""

from __future__ import annotations

from datetime import date

import polars as pl
import pytest

from reflex_datatable.frames import column_specs_from_schema, records_from_frame, scan_file
from reflex_datatable.models import ROW_ID_FIELD


class TestRecordsFromFrame:
    """Tests for records_from_frame()."""

    def test_unique_id_column_is_used(self):
        df = pl.DataFrame({"id": [10, 20], "name": ["a", "b"]})
        records, id_field = records_from_frame(df)
        assert id_field == "id"
        assert records == [{"id": 10, "name": "a"}, {"id": 20, "name": "b"}]

    def test_duplicate_ids_get_row_index(self):
        df = pl.DataFrame({"id": [".", "."], "name": ["a", "b"]})
        records, id_field = records_from_frame(df)
        assert id_field == ROW_ID_FIELD
        assert [r[ROW_ID_FIELD] for r in records] == [0, 1]

    def test_missing_id_column_gets_row_index(self):
        records, id_field = records_from_frame(pl.DataFrame({"x": [1]}))
        assert id_field == ROW_ID_FIELD
        assert records[0][ROW_ID_FIELD] == 0

    def test_explicit_id_field_is_trusted(self):
        records, id_field = records_from_frame(pl.DataFrame({"key": ["a", "a"]}), id_field="key")
        assert id_field == "key"
        assert ROW_ID_FIELD not in records[0]

    def test_lazy_frame_with_limit(self):
        lf = pl.LazyFrame({"id": list(range(10))})
        records, _ = records_from_frame(lf, limit=3)
        assert [r["id"] for r in records] == [0, 1, 2]

    def test_json_safe_values(self):
        df = pl.DataFrame({
            "id": [1],
            "day": [date(2024, 1, 2)],
            "tags": [["x", "y"]],
        })
        records, _ = records_from_frame(df)
        assert records[0]["day"] == "2024-01-02"
        assert records[0]["tags"] == "x,y"


class TestColumnSpecsFromSchema:
    """Tests for column_specs_from_schema()."""

    def test_humanised_headers_and_hidden_id(self):
        schema = {"id": pl.Int64, "first_name": pl.String, "tags": pl.List(pl.String)}
        specs = column_specs_from_schema(schema, id_field="id")
        assert [s.id for s in specs] == ["first_name", "tags"]
        assert specs[0].title == "First Name"
        assert specs[0].sortable
        assert not specs[1].sortable

    def test_shown_id_cannot_be_hidden(self):
        specs = column_specs_from_schema({"id": pl.Int64, "v": pl.Int64}, id_field="id", show_id_field=True)
        assert specs[0].id == "id"
        assert not specs[0].hideable
        assert specs[1].hideable

    def test_header_and_width_overrides(self):
        specs = column_specs_from_schema({"v": pl.Int64}, headers={"v": "Value"}, widths={"v": 120})
        assert specs[0].title == "Value"
        assert specs[0].size == 120


class TestScanFile:
    """Tests for scan_file()."""

    def test_csv(self, tmp_path):
        path = tmp_path / "data.csv"
        pl.DataFrame({"a": [1, 2]}).write_csv(path)
        assert scan_file(path).collect()["a"].to_list() == [1, 2]

    def test_tsv(self, tmp_path):
        path = tmp_path / "data.tsv"
        path.write_text("a\tb\n1\tx\n")
        assert scan_file(path).collect().columns == ["a", "b"]

    def test_parquet(self, tmp_path):
        path = tmp_path / "data.parquet"
        pl.DataFrame({"a": [1]}).write_parquet(path)
        assert scan_file(path).collect().height == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            scan_file(tmp_path / "nope.csv")

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "data.xlsx"
        path.write_text("")
        with pytest.raises(ValueError):
            scan_file(path)
