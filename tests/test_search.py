"""Tests for the debounced single-column SearchBox."""

from __future__ import annotations

import asyncio

from reflex_datatable.filters import Substring
from reflex_datatable.search import SearchBox
from reflex_datatable.store import GridStore


class TestSearchBox:
    """Tests for SearchBox."""

    def test_defaults_to_first_column(self, people, people_columns):
        store = GridStore(people, people_columns)
        box = SearchBox(store)
        assert box.search_column == "id"
        assert box.searchable_columns == ["id", "name", "age", "status", "email"]
        store.close()

    def test_applies_immediately_without_event_loop(self, people, people_columns):
        store = GridStore(people, people_columns)
        box = SearchBox(store, "name")
        box.handle_search("ali")
        assert store.filters == {"name": Substring("ali")}
        assert [row.id for row in store.filtered_rows] == [1]
        store.close()

    def test_debounces_typing(self, people, people_columns):
        """Only the text present after the quiet period is applied."""
        store = GridStore(people, people_columns)
        applied = []
        store.subscribe(lambda event, grid: applied.append(grid.get_filter_value("name")))

        async def main():
            box = SearchBox(store, "name", debounce=0.05)
            for text in ("m", "ma", "mal"):
                box.handle_search(text)
            assert box.pending
            assert store.filters == {}
            await asyncio.sleep(0.2)
            assert not box.pending

        asyncio.run(main())
        assert applied == ["mal"]
        assert [row.record["name"] for row in store.filtered_rows] == ["Mallory"]
        store.close()

    def test_column_switch_moves_text(self, people, people_columns):
        store = GridStore(people, people_columns)
        box = SearchBox(store, "name", ["name", "status"])
        box.handle_search("pend")
        assert store.filtered_rows == []
        box.set_search_column("status")
        assert store.filters == {"status": Substring("pend")}
        assert len(store.filtered_rows) == 4
        store.close()

    def test_column_switch_cancels_pending_debounce(self, people, people_columns):
        store = GridStore(people, people_columns)

        async def main():
            box = SearchBox(store, "name", ["name", "email"], debounce=0.05)
            box.handle_search("bob")
            box.set_search_column("email")
            assert not box.pending
            await asyncio.sleep(0.1)

        asyncio.run(main())
        assert store.filters == {"email": Substring("bob")}
        store.close()

    def test_unsearchable_column_is_ignored(self, people, people_columns):
        store = GridStore(people, people_columns)
        box = SearchBox(store, "name", ["name"])
        box.set_search_column("email")
        assert box.search_column == "name"
        store.close()

    def test_clear(self, people, people_columns):
        store = GridStore(people, people_columns)
        box = SearchBox(store, "name")
        box.handle_search("ali")
        box.clear()
        assert box.value == ""
        assert store.filters == {}
        assert len(store.filtered_rows) == 12
        store.close()

    def test_close_drops_pending_text(self, people, people_columns):
        store = GridStore(people, people_columns)

        async def main():
            box = SearchBox(store, "name", debounce=0.05)
            box.handle_search("ali")
            box.close()
            await asyncio.sleep(0.1)

        asyncio.run(main())
        assert store.filters == {}
        store.close()
