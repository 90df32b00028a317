"""Tests for stable multi-key sorting and the toggle cycle."""

from __future__ import annotations

import pytest

from reflex_datatable.models import ColumnSpec, GridRow, SortEntry
from reflex_datatable.sorting import compare_values, normalize_sorting, sort_records, toggle_sort


class TestCompareValues:
    """Tests for the three-way comparison."""

    def test_none_is_greatest(self):
        assert compare_values(None, 1) == 1
        assert compare_values(1, None) == -1
        assert compare_values(None, None) == 0

    def test_unorderable_values_compare_as_strings(self):
        """Mixed types do not raise."""
        assert compare_values(3, "x") == -1
        assert compare_values("x", 3) == 1


class TestSortRecords:
    """Tests for sort_records()."""

    def test_ascending_puts_none_last(self, people):
        """Missing ages go to the end when ascending."""
        result = sort_records(people, [SortEntry("age")])
        ages = [r["age"] for r in result]
        assert ages[-2:] == [None, None]
        assert ages[:-2] == sorted(a for a in ages if a is not None)

    def test_descending_puts_none_first(self, people):
        """Descending mirrors the ascending order, None included."""
        result = sort_records(people, [SortEntry("age", descending=True)])
        ages = [r["age"] for r in result]
        assert ages[:2] == [None, None]
        assert ages[2:] == sorted((a for a in ages if a is not None), reverse=True)

    def test_stable_for_ties(self, people):
        """Equal keys keep their input order."""
        result = sort_records(people, [SortEntry("status")])
        for status in ("active", "inactive", "pending"):
            ids = [r["id"] for r in result if r["status"] == status]
            assert ids == sorted(ids)

    def test_descending_ties_keep_input_order(self, people):
        """Flipping the direction does not reverse tied records."""
        result = sort_records(people, [SortEntry("status", descending=True)])
        assert [r["status"] for r in result][:4] == ["pending"] * 4
        assert [r["id"] for r in result][:4] == [3, 6, 9, 12]

    def test_secondary_key_breaks_ties(self, people):
        """Later entries only order records equal on earlier keys."""
        result = sort_records(people, [SortEntry("status"), SortEntry("name")])
        active = [r["name"] for r in result if r["status"] == "active"]
        assert active == sorted(active)
        assert [r["status"] for r in result] == sorted(r["status"] for r in people)

    def test_sort_is_idempotent(self, people):
        """Sorting an already-sorted list changes nothing."""
        sorting = [SortEntry("status"), SortEntry("age", descending=True)]
        once = sort_records(people, sorting)
        assert sort_records(once, sorting) == once

    def test_empty_sorting_returns_copy(self, people):
        result = sort_records(people, [])
        assert result == people
        assert result is not people

    def test_does_not_mutate_input(self, people):
        before = list(people)
        sort_records(people, [SortEntry("name")])
        assert people == before

    def test_grid_rows_sort_by_record(self):
        """GridRow items compare on their record."""
        rows = [GridRow(id=i, index=i, record={"v": v}) for i, v in enumerate([3, 1, 2])]
        assert [r.id for r in sort_records(rows, [SortEntry("v")])] == [1, 2, 0]

    def test_accessor_column(self):
        """Sorting uses the column accessor when columns are given."""
        columns = {"len": ColumnSpec("len", accessor=lambda r: len(r["s"]))}
        records = [{"s": "ccc"}, {"s": "a"}, {"s": "bb"}]
        result = sort_records(records, [SortEntry("len")], columns)
        assert [r["s"] for r in result] == ["a", "bb", "ccc"]


class TestToggleSort:
    """Tests for the ascending -> descending -> ascending cycle."""

    def test_cycle_never_returns_to_unsorted(self):
        """Repeated toggles alternate direction and keep the column."""
        sorting: list[SortEntry] = []
        directions = []
        for _ in range(5):
            sorting = toggle_sort(sorting, "name")
            assert len(sorting) == 1
            directions.append(sorting[0].descending)
        assert directions == [False, True, False, True, False]

    def test_single_sort_replaces_other_keys(self):
        sorting = [SortEntry("age"), SortEntry("name")]
        assert toggle_sort(sorting, "status") == [SortEntry("status")]

    def test_single_sort_flips_existing_key_and_drops_others(self):
        sorting = [SortEntry("age"), SortEntry("name")]
        assert toggle_sort(sorting, "name") == [SortEntry("name", descending=True)]

    def test_multi_appends_lowest_priority(self):
        sorting = [SortEntry("age")]
        assert toggle_sort(sorting, "name", multi=True) == [SortEntry("age"), SortEntry("name")]

    def test_multi_flips_in_place(self):
        sorting = [SortEntry("age"), SortEntry("name")]
        assert toggle_sort(sorting, "age", multi=True) == [
            SortEntry("age", descending=True),
            SortEntry("name"),
        ]


class TestNormalizeSorting:
    """Tests for accepted sort-entry shapes."""

    @pytest.mark.parametrize(
        "entry",
        [SortEntry("a", True), {"id": "a", "desc": True}, ("a", True)],
    )
    def test_shapes(self, entry):
        assert normalize_sorting([entry]) == [SortEntry("a", True)]

    def test_duplicates_keep_first(self):
        assert normalize_sorting([("a", False), ("a", True)]) == [SortEntry("a")]
