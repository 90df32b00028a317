"""Tests for the windowed row virtualizer."""

from __future__ import annotations

from reflex_datatable.virtualizer import Virtualizer, VirtualWindow


class TestEnablement:
    """Tests for the threshold switch."""

    def test_disabled_below_threshold(self):
        """Small lists render every row; the window is empty."""
        window = Virtualizer(50, threshold=100).get_window(0, 500)
        assert window == VirtualWindow.disabled()
        assert not window.enabled
        assert len(window) == 0

    def test_enabled_at_threshold(self):
        assert Virtualizer(100, threshold=100).enabled

    def test_master_switch(self):
        assert not Virtualizer(1000, enabled=False).get_window(0, 500).enabled

    def test_empty_list(self):
        assert not Virtualizer(0).enabled


class TestFixedSizeWindow:
    """Tests for windows over 48px rows."""

    def test_top_of_list(self):
        window = Virtualizer(1000, overscan=10).get_window(0, 480)
        assert window.start_index == 0
        assert window.end_index == 19
        assert window.total_size == 48_000
        assert window.offsets[:3] == [0, 48, 96]

    def test_middle_of_list_has_overscan_on_both_sides(self):
        window = Virtualizer(1000, overscan=10).get_window(4800, 480)
        assert window.start_index == 90
        assert window.end_index == 119
        assert window.items[0].start == 90 * 48

    def test_offset_past_end_is_clamped(self):
        """Scrolling beyond the content shows the last rows."""
        window = Virtualizer(1000, overscan=10).get_window(10**9, 480)
        assert window.end_index == 999
        assert window.start_index == 980

    def test_negative_offset_is_clamped(self):
        window = Virtualizer(1000, overscan=0).get_window(-500, 480)
        assert window.start_index == 0
        assert window.end_index == 9

    def test_window_is_pure(self):
        """Same inputs, same window."""
        virtualizer = Virtualizer(1000)
        assert virtualizer.get_window(1234, 600) == virtualizer.get_window(1234, 600)

    def test_sweep_covers_every_index(self):
        """Scrolling top to bottom materialises every row at least once."""
        virtualizer = Virtualizer(537, overscan=0)
        viewport = 300
        seen: set[int] = set()
        offset = 0
        while offset <= virtualizer.total_size:
            seen.update(virtualizer.get_window(offset, viewport).indices)
            offset += viewport
        assert seen == set(range(537))


class TestVariableSizes:
    """Tests for estimated and measured row heights."""

    def test_estimator_drives_offsets(self):
        virtualizer = Virtualizer(100, lambda i: 40 if i % 2 == 0 else 20)
        assert virtualizer.total_size == 3000
        assert virtualizer.item(3).start == 40 + 20 + 40

    def test_resize_item_shifts_later_rows(self):
        virtualizer = Virtualizer(10, lambda i: 10)
        assert virtualizer.item(5).start == 50
        virtualizer.resize_item(2, 30)
        assert virtualizer.item(2).size == 30
        assert virtualizer.item(5).start == 70
        assert virtualizer.total_size == 120

    def test_set_count_shrinks(self):
        virtualizer = Virtualizer(10, lambda i: 10)
        virtualizer.set_count(4)
        assert virtualizer.total_size == 40

    def test_offset_for_index(self):
        virtualizer = Virtualizer(1000)
        assert virtualizer.offset_for_index(100, 480) == 4800
        assert virtualizer.offset_for_index(100, 480, "end") == 4848 - 480
        assert virtualizer.offset_for_index(999, 480) == 48_000 - 480
