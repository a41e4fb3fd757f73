"""Time-decay ranker.

Deduplicates a candidate pool, removes suppressed ids and excluded
categories, scores survivors with gravity decay and keeps the top N.
"""

from src.ranker.metrics import RankerMetrics
from src.ranker.models import RankResult, ScoredItem
from src.ranker.ranker import ItemRanker, rank_items
from src.ranker.scorer import compute_score, hours_since


__all__ = [
    "ItemRanker",
    "RankResult",
    "RankerMetrics",
    "ScoredItem",
    "compute_score",
    "hours_since",
    "rank_items",
]
