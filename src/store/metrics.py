"""Metrics collection for the accumulation store and ledger."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass
class StoreMetrics:
    """Metrics for store and ledger operations.

    Attributes:
        merges_total: Number of snapshot merges written.
        items_new_total: Items inserted for the first time on their day.
        items_updated_total: Items overwritten by a fresher copy.
        snapshots_corrupt_total: Snapshots or ledgers read as empty.
        ledger_marks_total: Ids marked as published.
        bytes_written_total: Bytes written across all snapshot writes.
    """

    merges_total: int = 0
    items_new_total: int = 0
    items_updated_total: int = 0
    snapshots_corrupt_total: int = 0
    ledger_marks_total: int = 0
    bytes_written_total: int = 0

    _instance: ClassVar["StoreMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "StoreMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_merge(self, new: int, updated: int, bytes_written: int) -> None:
        """Record a completed merge.

        Args:
            new: Items that did not exist in the snapshot.
            updated: Items that replaced an existing entry.
            bytes_written: Size of the written snapshot.
        """
        self.merges_total += 1
        self.items_new_total += new
        self.items_updated_total += updated
        self.bytes_written_total += bytes_written

    def record_corrupt(self) -> None:
        """Record a snapshot or ledger that was treated as empty."""
        self.snapshots_corrupt_total += 1

    def record_ledger_marks(self, count: int) -> None:
        """Record ids marked as published.

        Args:
            count: Number of ids marked.
        """
        self.ledger_marks_total += count

    def to_dict(self) -> dict[str, int]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "merges_total": self.merges_total,
            "items_new_total": self.items_new_total,
            "items_updated_total": self.items_updated_total,
            "snapshots_corrupt_total": self.snapshots_corrupt_total,
            "ledger_marks_total": self.ledger_marks_total,
            "bytes_written_total": self.bytes_written_total,
        }
