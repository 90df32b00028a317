"""Grid configuration knobs.

Every grid instance carries its own :class:`GridConfig`; nothing here is
shared between grids.
"""

from dataclasses import dataclass, field

_DEFAULT_PAGE_SIZES: tuple[int, ...] = (5, 10, 25, 50)
_DEFAULT_PAGE_SIZE: int = 10
_DEFAULT_VIRTUALIZATION_THRESHOLD: int = 100
_DEFAULT_OFFLOAD_THRESHOLD: int = 1_000
_DEFAULT_DEBOUNCE_MS: int = 300
_DEFAULT_OVERSCAN: int = 10
_DEFAULT_ROW_SIZE: int = 48
_DEFAULT_COMPACT_BREAKPOINT: int = 768
_DEFAULT_COMPACT_PAGE_SIZE: int = 5


@dataclass(frozen=True)
class GridConfig:
    """Recognised options for a grid instance.

    Attributes:
        page_sizes: Page sizes offered to the user.
        initial_page_size: Page size used when the grid is created.
        virtualization_threshold: Row count at which the realized rows
            are windowed by the virtualizer.  Below it, all rows render.
        offload_threshold: Dataset size above which sort/filter/search
            run on the async offload processor.
        debounce_ms: Quiet period before typed search text is applied.
        overscan: Rows rendered beyond each edge of the viewport.
        estimated_row_size: Default row height estimate in pixels.
        compact_breakpoint: Viewport width (inclusive) at or below which
            the grid switches to compact mode.
        compact_page_size: Page size forced when entering compact mode.
        restore_page_size_on_expand: Restore the pre-compact page size
            when leaving compact mode.
        summary_min: Minimum number of auto-selected summary fields.
        summary_max: Maximum number of auto-selected summary fields.
        debug: Log warnings for filter values that degrade to
            "no constraint".
    """

    page_sizes: tuple[int, ...] = field(default=_DEFAULT_PAGE_SIZES)
    initial_page_size: int = _DEFAULT_PAGE_SIZE
    virtualization_threshold: int = _DEFAULT_VIRTUALIZATION_THRESHOLD
    offload_threshold: int = _DEFAULT_OFFLOAD_THRESHOLD
    debounce_ms: int = _DEFAULT_DEBOUNCE_MS
    overscan: int = _DEFAULT_OVERSCAN
    estimated_row_size: int = _DEFAULT_ROW_SIZE
    compact_breakpoint: int = _DEFAULT_COMPACT_BREAKPOINT
    compact_page_size: int = _DEFAULT_COMPACT_PAGE_SIZE
    restore_page_size_on_expand: bool = False
    summary_min: int = 2
    summary_max: int = 3
    debug: bool = False

    def __post_init__(self) -> None:
        if not self.page_sizes or any(size <= 0 for size in self.page_sizes):
            raise ValueError(f"page_sizes must be positive integers, got {self.page_sizes!r}")
        for name in ("initial_page_size", "compact_page_size", "estimated_row_size"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0, got {getattr(self, name)!r}")
        for name in (
            "virtualization_threshold",
            "offload_threshold",
            "debounce_ms",
            "overscan",
            "compact_breakpoint",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)!r}")
        if not 0 < self.summary_min <= self.summary_max:
            raise ValueError(
                f"summary bounds must satisfy 0 < min <= max, "
                f"got min={self.summary_min}, max={self.summary_max}"
            )

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000
