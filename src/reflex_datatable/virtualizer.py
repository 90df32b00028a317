"""Windowed row virtualization for long row lists.

Only the rows that intersect the viewport (plus an overscan margin on
each edge) need to be materialised.  Row heights may vary: each row's
size comes from an estimator and can later be replaced by a measured
size.  Cumulative offsets live in prefix arrays that are extended lazily
and truncated from the first changed index, so a scroll frame is a pair
of binary searches rather than a rescan of the whole dataset.

The window is a pure function of ``(scroll_offset, viewport_size, count,
estimator, overscan)``.  Virtualization is only an optimisation: when it
is disabled the window is empty and the caller renders every row.
"""

import bisect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

_DEFAULT_ROW_SIZE: int = 48
_DEFAULT_OVERSCAN: int = 10

Align = Literal["start", "center", "end"]


@dataclass(frozen=True)
class VirtualItem:
    index: int
    start: int
    size: int

    @property
    def end(self) -> int:
        return self.start + self.size


@dataclass(frozen=True)
class VirtualWindow:
    """Rows to materialise.  ``end_index`` is inclusive; empty when ``end_index < start_index``."""

    enabled: bool
    start_index: int
    end_index: int
    items: tuple[VirtualItem, ...]
    total_size: int

    @classmethod
    def disabled(cls) -> "VirtualWindow":
        return cls(enabled=False, start_index=0, end_index=-1, items=(), total_size=0)

    @property
    def indices(self) -> range:
        return range(self.start_index, self.end_index + 1)

    @property
    def offsets(self) -> list[int]:
        return [item.start for item in self.items]

    def __len__(self) -> int:
        return len(self.items)


class Virtualizer:
    """Compute :class:`VirtualWindow` objects for a list of *count* rows.

    Args:
        count: Number of rows.
        estimate_size: ``index -> pixels``.  Defaults to a fixed 48px row.
        overscan: Rows rendered beyond each edge of the viewport.
        enabled: Master switch.
        threshold: Virtualization only engages when ``count >= threshold``.
    """

    def __init__(
        self,
        count: int,
        estimate_size: Callable[[int], int] | None = None,
        *,
        overscan: int = _DEFAULT_OVERSCAN,
        enabled: bool = True,
        threshold: int = 0,
    ) -> None:
        self._count = max(0, count)
        self._estimate = estimate_size or (lambda _index: _DEFAULT_ROW_SIZE)
        self.overscan = max(0, overscan)
        self._enabled = enabled
        self.threshold = max(0, threshold)
        self._measured: dict[int, int] = {}
        self._starts: list[int] = []
        self._ends: list[int] = []

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    @property
    def count(self) -> int:
        return self._count

    @property
    def enabled(self) -> bool:
        return self._enabled and self._count > 0 and self._count >= self.threshold

    def set_count(self, count: int) -> None:
        count = max(0, count)
        if count == self._count:
            return
        self._invalidate_from(min(count, self._count))
        self._measured = {i: size for i, size in self._measured.items() if i < count}
        self._count = count

    def set_estimator(self, estimate_size: Callable[[int], int]) -> None:
        self._estimate = estimate_size
        self._invalidate_from(0)

    def resize_item(self, index: int, size: int) -> None:
        """Replace the estimate for *index* with a measured size."""
        if not 0 <= index < self._count:
            return
        size = max(0, int(size))
        if self._measured.get(index) == size:
            return
        self._measured[index] = size
        self._invalidate_from(index)

    # ------------------------------------------------------------------
    # Offsets
    # ------------------------------------------------------------------

    def _invalidate_from(self, index: int) -> None:
        del self._starts[index:]
        del self._ends[index:]

    def _size_of(self, index: int) -> int:
        if index in self._measured:
            return self._measured[index]
        return max(0, int(self._estimate(index)))

    def _ensure(self, upto: int) -> None:
        """Extend the prefix arrays so that item *upto* has an offset."""
        upto = min(upto, self._count - 1)
        position = self._ends[-1] if self._ends else 0
        for index in range(len(self._starts), upto + 1):
            size = self._size_of(index)
            self._starts.append(position)
            position += size
            self._ends.append(position)

    @property
    def total_size(self) -> int:
        if self._count == 0:
            return 0
        self._ensure(self._count - 1)
        return self._ends[-1]

    def item(self, index: int) -> VirtualItem:
        if not 0 <= index < self._count:
            raise IndexError(index)
        self._ensure(index)
        return VirtualItem(index=index, start=self._starts[index], size=self._ends[index] - self._starts[index])

    def clamp_offset(self, scroll_offset: float, viewport_size: float) -> float:
        max_offset = max(0.0, self.total_size - viewport_size)
        return max(0.0, min(float(scroll_offset), max_offset))

    def offset_for_index(self, index: int, viewport_size: float, align: Align = "start") -> float:
        """Scroll offset that brings *index* into view (scroll-to-index)."""
        index = max(0, min(index, self._count - 1))
        if self._count == 0:
            return 0.0
        item = self.item(index)
        if align == "center":
            target = item.start + item.size / 2 - viewport_size / 2
        elif align == "end":
            target = item.end - viewport_size
        else:
            target = item.start
        return self.clamp_offset(target, viewport_size)

    # ------------------------------------------------------------------
    # Window
    # ------------------------------------------------------------------

    def visible_range(self, scroll_offset: float, viewport_size: float) -> tuple[int, int]:
        """Inclusive index range intersecting the viewport, without overscan."""
        if self._count == 0 or viewport_size <= 0:
            return 0, -1
        total = self.total_size
        offset = self.clamp_offset(scroll_offset, viewport_size)
        bottom = min(offset + viewport_size, total)
        first = bisect.bisect_right(self._ends, offset)
        last = bisect.bisect_left(self._starts, bottom) - 1
        first = min(first, self._count - 1)
        last = max(first, min(last, self._count - 1))
        return first, last

    def get_window(self, scroll_offset: float, viewport_size: float) -> VirtualWindow:
        """Rows to render for the given scroll state."""
        if not self.enabled:
            return VirtualWindow.disabled()

        total = self.total_size
        first, last = self.visible_range(scroll_offset, viewport_size)
        if last < first:
            return VirtualWindow(enabled=True, start_index=0, end_index=-1, items=(), total_size=total)

        start = max(0, first - self.overscan)
        end = min(self._count - 1, last + self.overscan)
        items = tuple(
            VirtualItem(index=i, start=self._starts[i], size=self._ends[i] - self._starts[i])
            for i in range(start, end + 1)
        )
        return VirtualWindow(enabled=True, start_index=start, end_index=end, items=items, total_size=total)
