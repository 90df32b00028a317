"""Page arithmetic: display facts and clamped navigation."""

import math
from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class PageFacts:
    """1-indexed display values for a pagination footer ("11-12 of 12")."""

    start_item: int
    end_item: int
    current_page: int
    total_pages: int

    def to_dict(self) -> dict[str, int]:
        return {
            "startItem": self.start_item,
            "endItem": self.end_item,
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
        }


def page_count(page_size: int, total_items: int) -> int:
    """Number of pages, never less than 1 (an empty grid still has one page)."""
    if total_items <= 0:
        return 1
    return math.ceil(total_items / max(1, page_size))


def compute_page_facts(page_index: int, page_size: int, total_items: int) -> PageFacts:
    """Derive display facts from the pagination state.

    Args:
        page_index: Zero-based page index.
        page_size: Rows per page.
        total_items: Number of rows after filtering.

    Returns:
        A :class:`PageFacts` where ``start_item``/``end_item`` are the
        1-indexed bounds of the page and ``end_item`` is 0 for an empty set.
    """
    page_size = max(1, page_size)
    offset = page_index * page_size
    return PageFacts(
        start_item=offset + 1,
        end_item=max(0, min(offset + page_size, total_items)),
        current_page=page_index + 1,
        total_pages=page_count(page_size, total_items),
    )


@dataclass(frozen=True)
class PaginationState:
    """``(page_index, page_size)`` with navigation that always re-clamps.

    All navigation methods return a new state; the owner decides when to
    commit it.
    """

    page_index: int = 0
    page_size: int = 10

    def __post_init__(self) -> None:
        if self.page_size <= 0:
            object.__setattr__(self, "page_size", 1)
        if self.page_index < 0:
            object.__setattr__(self, "page_index", 0)

    def page_count(self, total_items: int) -> int:
        return page_count(self.page_size, total_items)

    def clamp(self, total_items: int) -> "PaginationState":
        max_index = self.page_count(total_items) - 1
        index = max(0, min(self.page_index, max_index))
        if index == self.page_index:
            return self
        return replace(self, page_index=index)

    def page_bounds(self, total_items: int) -> tuple[int, int]:
        """Half-open ``[start, stop)`` slice of the filtered rows on this page."""
        start = self.page_index * self.page_size
        return start, max(start, min(total_items, start + self.page_size))

    def can_previous_page(self) -> bool:
        return self.page_index > 0

    def can_next_page(self, total_items: int) -> bool:
        return self.page_index < self.page_count(total_items) - 1

    def set_page_index(self, page_index: int, total_items: int) -> "PaginationState":
        return replace(self, page_index=max(0, page_index)).clamp(total_items)

    def first_page(self, total_items: int) -> "PaginationState":
        return self.set_page_index(0, total_items)

    def previous_page(self, total_items: int) -> "PaginationState":
        return self.set_page_index(self.page_index - 1, total_items)

    def next_page(self, total_items: int) -> "PaginationState":
        return self.set_page_index(self.page_index + 1, total_items)

    def last_page(self, total_items: int) -> "PaginationState":
        return self.set_page_index(self.page_count(total_items) - 1, total_items)

    def set_page_size(self, page_size: int) -> "PaginationState":
        """Change the page size and restart at the first page."""
        return PaginationState(page_index=0, page_size=max(1, page_size))

    def facts(self, total_items: int) -> PageFacts:
        return compute_page_facts(self.page_index, self.page_size, total_items)

    def to_dict(self) -> dict[str, Any]:
        return {"page": self.page_index, "pageSize": self.page_size}
