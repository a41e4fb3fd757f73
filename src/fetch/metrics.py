"""Metrics collection for the HTTP fetch layer and the bounded pool."""

import threading
from dataclasses import dataclass, field
from typing import ClassVar

from src.fetch.models import FetchErrorClass


@dataclass
class FetchMetrics:
    """Metrics for HTTP fetch operations.

    Singleton class that tracks request counts by status, retries,
    failures by class, bytes received and cumulative duration.
    """

    http_requests_total: dict[int, int] = field(default_factory=dict)
    http_retry_total: int = 0
    http_failures_total: dict[str, int] = field(default_factory=dict)
    http_bytes_total: int = 0
    http_duration_ms_total: float = 0.0
    http_request_count: int = 0

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _instance: ClassVar["FetchMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_request(self, status_code: int, bytes_received: int) -> None:
        """Record a completed HTTP request.

        Args:
            status_code: HTTP status code.
            bytes_received: Number of bytes received.
        """
        with self._lock:
            self.http_requests_total[status_code] = (
                self.http_requests_total.get(status_code, 0) + 1
            )
            self.http_bytes_total += bytes_received
            self.http_request_count += 1

    def record_retry(self) -> None:
        """Record a retry attempt."""
        with self._lock:
            self.http_retry_total += 1

    def record_failure(self, error_class: FetchErrorClass) -> None:
        """Record a fetch failure.

        Args:
            error_class: Classification of the failure.
        """
        key = error_class.value
        with self._lock:
            self.http_failures_total[key] = self.http_failures_total.get(key, 0) + 1

    def record_duration(self, duration_ms: float) -> None:
        """Record request duration."""
        with self._lock:
            self.http_duration_ms_total += duration_ms

    @property
    def avg_duration_ms(self) -> float:
        """Average duration per completed request in milliseconds."""
        if self.http_request_count == 0:
            return 0.0
        return self.http_duration_ms_total / self.http_request_count

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "http_requests_total": dict(self.http_requests_total),
            "http_retry_total": self.http_retry_total,
            "http_failures_total": dict(self.http_failures_total),
            "http_bytes_total": self.http_bytes_total,
            "http_duration_ms_total": self.http_duration_ms_total,
            "http_request_count": self.http_request_count,
        }


@dataclass
class PoolMetrics:
    """Metrics for bounded pool runs.

    Attributes:
        runs_total: Number of pool invocations with at least one unit.
        units_total: Units handed to the pool.
        units_failed_total: Units whose work raised.
        units_empty_total: Units whose work produced no result.
        workers_started_total: Workers started across all runs.
    """

    runs_total: int = 0
    units_total: int = 0
    units_failed_total: int = 0
    units_empty_total: int = 0
    workers_started_total: int = 0

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _instance: ClassVar["PoolMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "PoolMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_run(self, units: int, workers: int) -> None:
        """Record the start of a pool run."""
        with self._lock:
            self.runs_total += 1
            self.units_total += units
            self.workers_started_total += workers

    def record_failure(self) -> None:
        """Record a unit whose work raised."""
        with self._lock:
            self.units_failed_total += 1

    def record_empty(self) -> None:
        """Record a unit that yielded nothing."""
        with self._lock:
            self.units_empty_total += 1

    def to_dict(self) -> dict[str, int]:
        """Convert metrics to dictionary."""
        return {
            "runs_total": self.runs_total,
            "units_total": self.units_total,
            "units_failed_total": self.units_failed_total,
            "units_empty_total": self.units_empty_total,
            "workers_started_total": self.workers_started_total,
        }
