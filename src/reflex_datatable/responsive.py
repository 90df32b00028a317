"""Viewport-width breakpoint tracking for compact (narrow) presentation."""

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

_DEFAULT_BREAKPOINT: int = 768


class ResponsiveModeSelector:
    """Expose a boolean ``compact`` flag driven by the viewport width.

    Matches a ``(max-width: <breakpoint>px)`` media query: a width equal
    to the breakpoint is compact.  Before the first width is reported the
    flag holds *default* (desktop-first).
    """

    def __init__(self, breakpoint: int = _DEFAULT_BREAKPOINT, default: bool = False) -> None:
        self.breakpoint = breakpoint
        self._compact = default
        self._width: float | None = None
        self._listeners: list[Callable[[bool], None]] = []

    @property
    def compact(self) -> bool:
        return self._compact

    @property
    def width(self) -> float | None:
        return self._width

    def is_compact_width(self, width: float) -> bool:
        return width <= self.breakpoint

    def update(self, width: float) -> bool:
        """Record a new viewport width.  Returns True when ``compact`` flipped."""
        self._width = width
        compact = self.is_compact_width(width)
        if compact == self._compact:
            return False
        self._compact = compact
        logger.debug("[Responsive] width=%s compact=%s", width, compact)
        for listener in list(self._listeners):
            listener(compact)
        return True

    def subscribe(self, listener: Callable[[bool], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
