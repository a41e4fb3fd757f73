"""Metrics collection for the collectors."""

from collections import Counter
from dataclasses import dataclass, field
from threading import Lock

from src.collectors.errors import CollectorErrorClass


_metrics_instance: "CollectorMetrics | None" = None
_metrics_lock: Lock = Lock()


@dataclass
class CollectorMetrics:
    """Thread-safe metrics for collector operations.

    Feeds are keyed ``<source>:<list or node>``, e.g. ``hackernews:top``.
    Use get_instance() for singleton access.
    """

    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    items_by_feed: Counter[str] = field(default_factory=Counter)
    failures_by_feed_error: Counter[tuple[str, str]] = field(default_factory=Counter)
    duration_by_feed: dict[str, float] = field(default_factory=dict)
    enriched_total: int = 0
    total_items: int = 0
    total_failures: int = 0

    @classmethod
    def get_instance(cls) -> "CollectorMetrics":
        """Get the singleton instance (thread-safe)."""
        global _metrics_instance  # noqa: PLW0603
        if _metrics_instance is None:
            with _metrics_lock:
                if _metrics_instance is None:
                    _metrics_instance = cls()
        return _metrics_instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (for testing)."""
        global _metrics_instance  # noqa: PLW0603
        with _metrics_lock:
            _metrics_instance = None

    def record_items(self, feed: str, count: int) -> None:
        """Record items collected from a feed."""
        with self._lock:
            self.items_by_feed[feed] += count
            self.total_items += count

    def record_failure(self, feed: str, error_class: CollectorErrorClass) -> None:
        """Record a feed that failed as a whole."""
        with self._lock:
            self.failures_by_feed_error[(feed, error_class.value)] += 1
            self.total_failures += 1

    def record_duration(self, feed: str, duration_ms: float) -> None:
        """Record collection duration for a feed."""
        with self._lock:
            self.duration_by_feed[feed] = duration_ms

    def record_enriched(self, count: int) -> None:
        """Record items whose content was enriched."""
        with self._lock:
            self.enriched_total += count

    def to_dict(self) -> dict[str, object]:
        """Export metrics as dictionary."""
        with self._lock:
            return {
                "total_items": self.total_items,
                "total_failures": self.total_failures,
                "enriched_total": self.enriched_total,
                "items_by_feed": dict(self.items_by_feed),
                "failures_by_feed_error": {
                    f"{feed}:{error}": count
                    for (feed, error), count in self.failures_by_feed_error.items()
                },
                "duration_by_feed": dict(self.duration_by_feed),
            }
