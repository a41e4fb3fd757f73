"""Metrics collection for the ranker module."""

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class RankerMetrics:
    """Metrics for ranker operations.

    Attributes:
        runs_total: Ranking passes performed.
        items_in_total: Candidates seen across passes.
        items_out_total: Items returned across passes.
        dropped_by_reason: Candidates removed per reason.
        score_values: Scores of returned items for percentile calculation.
    """

    runs_total: int = 0
    items_in_total: int = 0
    items_out_total: int = 0
    dropped_by_reason: dict[str, int] = field(default_factory=dict)
    score_values: list[float] = field(default_factory=list)

    _instance: ClassVar["RankerMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "RankerMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_run(self, items_in: int, items_out: int) -> None:
        """Record a completed ranking pass."""
        self.runs_total += 1
        self.items_in_total += items_in
        self.items_out_total += items_out

    def record_drops(self, dropped: dict[str, int]) -> None:
        """Accumulate per-reason drop counts."""
        for reason, count in dropped.items():
            self.dropped_by_reason[reason] = self.dropped_by_reason.get(reason, 0) + count

    def record_score(self, score: float) -> None:
        """Record a returned item's score."""
        self.score_values.append(score)

    def get_score_percentiles(self) -> dict[str, float]:
        """Calculate p50/p90/p99 over recorded scores.

        Returns:
            Dictionary with percentile values, empty when nothing was scored.
        """
        if not self.score_values:
            return {}

        sorted_scores = sorted(self.score_values)
        n = len(sorted_scores)

        def percentile(p: float) -> float:
            idx = int(p * (n - 1))
            return sorted_scores[idx]

        return {
            "p50": percentile(0.50),
            "p90": percentile(0.90),
            "p99": percentile(0.99),
        }

    def to_dict(self) -> dict[str, object]:
        """Convert metrics to dictionary."""
        return {
            "runs_total": self.runs_total,
            "items_in_total": self.items_in_total,
            "items_out_total": self.items_out_total,
            "dropped_by_reason": dict(self.dropped_by_reason),
            "score_percentiles": self.get_score_percentiles(),
        }
