"""Tests for filter predicates and quick search.

Tests:
- normalize_filter_value() / is_active_filter() for each value shape
- FilterEngine.matches() for value sets, substrings and unknown types
- filter_fn overrides
- filter_records() AND semantics and subset property
- search_records() OR semantics
- facet_values()
"""

from __future__ import annotations

import logging

from reflex_datatable.filters import (
    FilterEngine,
    NoFilter,
    Substring,
    ValueSet,
    filter_records,
    filter_value_to_json,
    is_active_filter,
    matches,
    normalize_filter_value,
    search_records,
)
from reflex_datatable.models import ColumnSpec, GridRow


# =============================================================================
# Normalisation
# =============================================================================


class TestNormalizeFilterValue:
    """Tests for turning raw values into the tagged variant."""

    def test_list_becomes_value_set(self):
        """Lists, tuples and sets become ValueSet."""
        assert normalize_filter_value(["a", "b"]) == ValueSet(("a", "b"))
        assert normalize_filter_value(("a",)) == ValueSet(("a",))
        assert isinstance(normalize_filter_value({"a"}), ValueSet)

    def test_string_becomes_substring(self):
        """Strings become Substring."""
        assert normalize_filter_value("ali") == Substring("ali")

    def test_other_types_become_no_filter(self):
        """Numbers and dicts carry no constraint but keep the raw value."""
        value = normalize_filter_value(42)
        assert isinstance(value, NoFilter)
        assert value.raw == 42

    def test_already_normalized_passes_through(self):
        """A normalised value is returned unchanged."""
        value = Substring("x")
        assert normalize_filter_value(value) is value

    def test_json_round_trip_of_raw_shapes(self):
        """filter_value_to_json gives back the caller's shape."""
        assert filter_value_to_json(normalize_filter_value(["a"])) == ["a"]
        assert filter_value_to_json(normalize_filter_value("a")) == "a"
        assert filter_value_to_json(normalize_filter_value(7)) == 7


class TestIsActiveFilter:
    """Tests for empty-value detection."""

    def test_empty_values_are_inactive(self):
        """None, "" and [] mean no constraint."""
        assert not is_active_filter(None)
        assert not is_active_filter("")
        assert not is_active_filter([])
        assert not is_active_filter(ValueSet(()))
        assert not is_active_filter(NoFilter())

    def test_non_empty_values_are_active(self):
        """Non-empty values and unknown types are active."""
        assert is_active_filter("a")
        assert is_active_filter(["a"])
        assert is_active_filter(0)


# =============================================================================
# Matching
# =============================================================================


class TestMatches:
    """Tests for single-filter evaluation."""

    def test_value_set_membership(self):
        """ValueSet matches by exact equality."""
        record = {"status": "active"}
        assert matches(record, "status", ["active", "pending"])
        assert not matches(record, "status", ["inactive"])
        assert not matches(record, "status", ["Active"])

    def test_empty_value_set_matches_everything(self):
        """An empty list is no constraint."""
        assert matches({"status": "x"}, "status", [])

    def test_substring_is_case_insensitive(self):
        """Substring folds case on both sides."""
        record = {"name": "Alice"}
        assert matches(record, "name", "LIC")
        assert matches(record, "name", "ali")
        assert not matches(record, "name", "bob")

    def test_substring_stringifies_numbers(self):
        """Numeric fields are compared by their string form."""
        assert matches({"age": 34}, "age", "3")

    def test_missing_field_never_matches_substring(self):
        """None / missing fields fail a non-empty substring."""
        assert not matches({"name": None}, "name", "a")
        assert not matches({}, "name", "a")

    def test_unknown_type_is_no_constraint(self):
        """Numbers, dicts and other types never filter anything out."""
        assert matches({"age": 1}, "age", 99)
        assert matches({"age": 1}, "age", {"op": ">"})

    def test_unknown_type_warns_once_in_debug(self, caplog):
        """Debug mode logs one warning per (column, type)."""
        engine = FilterEngine(debug=True)
        with caplog.at_level(logging.WARNING, logger="reflex_datatable.filters"):
            for _ in range(3):
                engine.matches({"age": 1}, "age", 5)
            engine.matches({"age": 1}, "age", 5.5)
        warnings = [r for r in caplog.records if "unsupported value type" in r.getMessage()]
        assert len(warnings) == 2

    def test_no_warning_without_debug(self, caplog):
        """Without debug the fallback is silent."""
        engine = FilterEngine()
        with caplog.at_level(logging.WARNING, logger="reflex_datatable.filters"):
            engine.matches({"age": 1}, "age", 5)
        assert not caplog.records

    def test_filter_fn_override_receives_raw_value(self):
        """A column's filter_fn replaces the built-in semantics."""
        seen = []

        def at_least(record, column_id, value):
            seen.append(value)
            return record[column_id] >= value

        column = ColumnSpec("age", filter_fn=at_least)
        assert matches({"age": 30}, "age", 18, column)
        assert not matches({"age": 10}, "age", 18, column)
        assert seen == [18, 18]

    def test_accessor_is_used(self):
        """Columns with an accessor filter on the derived value."""
        column = ColumnSpec("full", accessor=lambda r: f"{r['first']} {r['last']}")
        assert matches({"first": "Ada", "last": "Lovelace"}, "full", "ada love", column)

    def test_grid_rows_are_unwrapped(self):
        """GridRow wrappers are evaluated on their record."""
        row = GridRow(id=1, index=0, record={"status": "active"})
        assert FilterEngine().matches(row, "status", ["active"])


class TestFilterRecords:
    """Tests for AND-combined column filters."""

    def test_and_semantics(self, people):
        """A record must satisfy every active filter."""
        result = filter_records(people, {"status": ["active"], "name": "a"})
        assert [r["name"] for r in result] == ["Alice", "dave", "Grace"]

    def test_result_is_subset_in_input_order(self, people):
        """Filtering only removes records and never reorders them."""
        result = filter_records(people, {"status": ["pending", "inactive"]})
        ids = [r["id"] for r in result]
        assert set(ids) <= {p["id"] for p in people}
        assert ids == sorted(ids)

    def test_empty_filters_keep_everything(self, people):
        """Empty filter values are dropped."""
        assert filter_records(people, {"status": [], "name": ""}) == people

    def test_every_match_is_reported(self, people):
        """Each kept record passes, each dropped record fails."""
        filters = {"status": ["active"]}
        kept = filter_records(people, filters)
        for record in people:
            assert (record in kept) == matches(record, "status", ["active"])


class TestSearchRecords:
    """Tests for OR-combined quick search."""

    def test_any_column_matches(self, people):
        """A record passes when any searched column contains the term."""
        result = search_records(people, "pend", ["name", "status"])
        assert result
        assert all(r["status"] == "pending" for r in result)

    def test_or_across_columns(self):
        """Matching in one column is enough."""
        records = [{"a": "x", "b": "y"}, {"a": "y", "b": "x"}, {"a": "z", "b": "z"}]
        assert search_records(records, "x", ["a", "b"]) == records[:2]

    def test_empty_term_keeps_everything(self, people):
        """An empty term is no search."""
        assert search_records(people, "", ["name"]) == people
        assert search_records(people, None, ["name"]) == people

    def test_missing_values_do_not_match(self):
        """None never contains the term."""
        assert search_records([{"a": None}], "none", ["a"]) == []


class TestFacetValues:
    """Tests for distinct-value collection."""

    def test_sorted_distinct_non_null(self, people):
        """Values are unique, sorted and exclude None."""
        engine = FilterEngine()
        assert engine.facet_values(people, "status") == ["active", "inactive", "pending"]
        ages = engine.facet_values(people, "age")
        assert None not in ages
        assert ages == sorted(ages)

    def test_mixed_types_fall_back_to_str_order(self):
        """Unorderable values are sorted by their string form."""
        engine = FilterEngine()
        assert engine.facet_values([{"v": 2}, {"v": "a"}, {"v": 10}], "v") == [10, 2, "a"]
