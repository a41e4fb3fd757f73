"""Bounded-concurrency work pool with per-unit failure isolation.

Workers drain a shared cursor: each claims the next unclaimed index, runs
the work on it and records the result. A unit that raises (or yields
``None``) is logged and skipped; it never cancels sibling units.
"""

import threading
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

import structlog

from src.fetch.metrics import PoolMetrics


logger = structlog.get_logger()

T = TypeVar("T")
R = TypeVar("R")


class _SharedCursor:
    """Hands out each index in ``range(total)`` exactly once."""

    def __init__(self, total: int) -> None:
        self._total = total
        self._next = 0
        self._lock = threading.Lock()

    def claim(self) -> int | None:
        with self._lock:
            if self._next >= self._total:
                return None
            index = self._next
            self._next += 1
            return index


def run_bounded(
    units: Sequence[T],
    limit: int,
    work: Callable[[T], R | None],
    *,
    label: str = "units",
) -> list[R]:
    """Run ``work`` over every unit with at most ``limit`` in flight.

    Results come back in completion order. Use ``run_bounded_ordered``
    when the caller needs input order.

    Args:
        units: Work items.
        limit: Maximum number of concurrent workers. Must be >= 1.
        work: Callable applied to each unit. Raising or returning ``None``
            drops the unit.
        label: Short name used in logs and worker thread names.

    Returns:
        Results of the units that succeeded.

    Raises:
        ValueError: If ``limit`` is less than 1.
    """
    if limit < 1:
        msg = f"Concurrency limit must be >= 1, got {limit}"
        raise ValueError(msg)
    if not units:
        return []

    metrics = PoolMetrics.get_instance()
    log = logger.bind(component="pool", label=label)
    cursor = _SharedCursor(len(units))
    results: list[R] = []
    results_lock = threading.Lock()
    workers = min(limit, len(units))
    metrics.record_run(len(units), workers)

    def drain() -> None:
        while (index := cursor.claim()) is not None:
            try:
                result = work(units[index])
            except Exception as e:  # noqa: BLE001
                metrics.record_failure()
                log.warning(
                    "unit_failed",
                    index=index,
                    error_class=type(e).__name__,
                    error=str(e),
                )
                continue
            if result is None:
                metrics.record_empty()
                log.debug("unit_empty", index=index)
                continue
            with results_lock:
                results.append(result)

    with ThreadPoolExecutor(
        max_workers=workers, thread_name_prefix=f"pool-{label}"
    ) as executor:
        futures = [executor.submit(drain) for _ in range(workers)]
        for future in futures:
            future.result()

    log.debug(
        "pool_drained",
        units=len(units),
        workers=workers,
        succeeded=len(results),
    )
    return results


def run_bounded_ordered(
    units: Sequence[T],
    limit: int,
    work: Callable[[T], R | None],
    *,
    label: str = "units",
) -> list[R]:
    """Like ``run_bounded`` but returns results in input order.

    Dropped units leave no gap; the surviving results keep the relative
    order of their units.
    """

    def indexed(pair: tuple[int, T]) -> tuple[int, R] | None:
        index, unit = pair
        result = work(unit)
        if result is None:
            return None
        return index, result

    tagged = run_bounded(list(enumerate(units)), limit, indexed, label=label)
    tagged.sort(key=lambda pair: pair[0])
    return [result for _, result in tagged]
