"""Non-blocking sort/filter/search over the full dataset.

:class:`AsyncOffloadProcessor` yields to the event loop once and then
runs the computation on a small per-grid thread pool, so input handling
stays responsive while a large dataset is being reordered.  It exists to
keep the loop free, not to parallelise work.

Every request is tagged with a token from a per-operation counter.  When
a newer request of the same operation has been issued by the time a
result arrives, the result is flagged ``stale`` and consumers must drop
it.  A late answer to an old search can therefore never overwrite the
answer to the current one.

:class:`Debouncer` provides the quiet period applied to typed search
text before it reaches the processor.
"""

import asyncio
import inspect
import itertools
import logging
import time
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Literal

from reflex_datatable.filters import FilterEngine
from reflex_datatable.models import ColumnSpec, SortEntry
from reflex_datatable.sorting import sort_records

logger = logging.getLogger(__name__)

_DEFAULT_OFFLOAD_THRESHOLD: int = 1_000
_MAX_WORKERS: int = 2

Operation = Literal["sort", "filter", "search"]


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SortPayload:
    rows: Sequence[Any]
    sorting: Sequence[SortEntry]
    columns: Mapping[str, ColumnSpec] | None = None


@dataclass(frozen=True)
class FilterPayload:
    rows: Sequence[Any]
    filters: Mapping[str, Any]
    engine: FilterEngine | None = None


@dataclass(frozen=True)
class SearchPayload:
    rows: Sequence[Any]
    term: str | None
    column_ids: Sequence[str]
    engine: FilterEngine | None = None


@dataclass(frozen=True)
class OffloadResult:
    """Outcome of one offloaded request.  Drop it when ``stale`` is true."""

    operation: str
    token: int
    rows: list[Any]
    stale: bool
    elapsed_ms: float


def _run_sort(payload: SortPayload) -> list[Any]:
    return sort_records(payload.rows, payload.sorting, payload.columns)


def _run_filter(payload: FilterPayload) -> list[Any]:
    engine = payload.engine or FilterEngine()
    return engine.filter_records(payload.rows, payload.filters)


def _run_search(payload: SearchPayload) -> list[Any]:
    engine = payload.engine or FilterEngine()
    return engine.search_records(payload.rows, payload.term, payload.column_ids)


_HANDLERS: dict[str, Callable[[Any], list[Any]]] = {
    "sort": _run_sort,
    "filter": _run_filter,
    "search": _run_search,
}


# ---------------------------------------------------------------------------
# Processor
# ---------------------------------------------------------------------------

class AsyncOffloadProcessor:
    """Run sort/filter/search without blocking the caller's event loop.

    Args:
        threshold: Datasets with more rows than this are offloaded; at or
            below it callers should use the synchronous path.
        executor: Executor to dispatch to.  When omitted the processor
            owns a small thread pool and shuts it down in :meth:`close`.
    """

    def __init__(
        self,
        threshold: int = _DEFAULT_OFFLOAD_THRESHOLD,
        *,
        executor: Executor | None = None,
    ) -> None:
        self.threshold = threshold
        self._executor = executor
        self._owns_executor = executor is None
        self._counters: dict[str, itertools.count] = {op: itertools.count(1) for op in _HANDLERS}
        self._latest: dict[str, int] = {op: 0 for op in _HANDLERS}
        self._inflight: set[asyncio.Future[Any]] = set()
        self._closed = False

    def should_offload(self, row_count: int) -> bool:
        return row_count > self.threshold

    def latest_token(self, operation: str) -> int:
        return self._latest[operation]

    def is_current(self, operation: str, token: int) -> bool:
        return self._latest.get(operation) == token

    def _get_executor(self) -> Executor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=_MAX_WORKERS,
                thread_name_prefix="datatable-offload",
            )
        return self._executor

    async def run(self, operation: Operation, payload: Any) -> OffloadResult:
        """Compute *operation* over *payload* off the event loop.

        Raises:
            ValueError: If *operation* is not ``sort``, ``filter`` or ``search``.
            RuntimeError: If the processor has been closed.
        """
        handler = _HANDLERS.get(operation)
        if handler is None:
            raise ValueError(f"Unknown offload operation: {operation!r}")
        if self._closed:
            raise RuntimeError("AsyncOffloadProcessor is closed")

        token = next(self._counters[operation])
        self._latest[operation] = token

        # Give pending input events a turn before starting the work.
        await asyncio.sleep(0)

        loop = asyncio.get_running_loop()
        t0 = time.perf_counter()
        future = loop.run_in_executor(self._get_executor(), handler, payload)
        self._inflight.add(future)
        try:
            rows = await future
        finally:
            self._inflight.discard(future)
        elapsed_ms = (time.perf_counter() - t0) * 1000

        stale = not self.is_current(operation, token)
        logger.debug(
            "[Offload] %s token=%d rows=%d stale=%s elapsed=%.1fms",
            operation,
            token,
            len(rows),
            stale,
            elapsed_ms,
        )
        return OffloadResult(
            operation=operation,
            token=token,
            rows=rows,
            stale=stale,
            elapsed_ms=elapsed_ms,
        )

    def cancel_pending(self) -> None:
        """Cancel every in-flight request; their awaiters see ``CancelledError``."""
        for future in list(self._inflight):
            future.cancel()
        self._inflight.clear()

    def close(self) -> None:
        self._closed = True
        self.cancel_pending()
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None


# ---------------------------------------------------------------------------
# Debounce
# ---------------------------------------------------------------------------

class Debouncer:
    """Delay a callback until *delay* seconds pass without another call.

    Calls made while no event loop is running fire immediately, which
    keeps synchronous callers (scripts, the CLI) working unchanged.
    """

    def __init__(self, delay: float, callback: Callable[..., Any]) -> None:
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._args: tuple[Any, ...] = ()
        self._kwargs: dict[str, Any] = {}

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def call(self, *args: Any, **kwargs: Any) -> None:
        self.cancel()
        self._args, self._kwargs = args, kwargs
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._fire()
            return
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> bool:
        """Drop the pending call, if any.  Returns whether one was dropped."""
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        self._args, self._kwargs = (), {}
        return True

    def flush(self) -> None:
        """Fire the pending call now."""
        if self._handle is None:
            return
        self._handle.cancel()
        self._fire()

    def _fire(self) -> None:
        self._handle = None
        args, kwargs = self._args, self._kwargs
        self._args, self._kwargs = (), {}
        result = self._callback(*args, **kwargs)
        if inspect.isawaitable(result):
            asyncio.ensure_future(result)
