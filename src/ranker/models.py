"""Data models for the time-decay ranker."""

from dataclasses import dataclass, field

from src.store.models import NormalizedItem


@dataclass(frozen=True)
class ScoredItem:
    """A NormalizedItem paired with its score for one ranking pass.

    Attributes:
        item: The ranked item.
        score: Non-negative decay score.
    """

    item: NormalizedItem
    score: float


@dataclass
class RankResult:
    """Outcome of one ranking pass.

    Attributes:
        ranked: Items in descending score order, at most ``top_n`` long.
        items_in: Size of the candidate pool.
        dropped_by_reason: Count of candidates removed at each stage.
    """

    ranked: list[ScoredItem]
    items_in: int
    dropped_by_reason: dict[str, int] = field(default_factory=dict)

    @property
    def items_out(self) -> int:
        """Number of ranked items."""
        return len(self.ranked)
