"""Shared fixtures for the grid engine tests."""

from __future__ import annotations

import time
from typing import Any

import pytest

from reflex_datatable import offload
from reflex_datatable.models import ColumnSpec


def make_people() -> list[dict[str, Any]]:
    names = [
        "Alice", "bob", "Carol", "dave", "Eve", "Frank",
        "Grace", "heidi", "Ivan", "Judy", "Mallory", "Niaj",
    ]
    statuses = ["active", "inactive", "pending"]
    return [
        {
            "id": i + 1,
            "name": name,
            "age": None if i % 5 == 4 else 20 + (i * 7) % 30,
            "status": statuses[i % 3],
            "email": f"{name.lower()}@example.com",
        }
        for i, name in enumerate(names)
    ]


@pytest.fixture
def people() -> list[dict[str, Any]]:
    return make_people()


@pytest.fixture
def people_columns() -> list[ColumnSpec]:
    return [
        ColumnSpec("id", hideable=False),
        ColumnSpec("name"),
        ColumnSpec("age"),
        ColumnSpec("status"),
        ColumnSpec("email", sortable=False),
    ]


@pytest.fixture
def slow_short_search(monkeypatch):
    """Make offloaded searches for the one-letter term "a" take noticeably longer."""
    original = offload._HANDLERS["search"]

    def search(payload):
        if payload.term == "a":
            time.sleep(0.3)
        return original(payload)

    monkeypatch.setitem(offload._HANDLERS, "search", search)
