"""Time-decay ranker: dedupe, filter, score, sort, truncate."""

from collections.abc import Collection, Iterable
from datetime import UTC, datetime

import structlog

from src.ranker.constants import (
    DROP_DUPLICATE,
    DROP_EXCLUDED_CATEGORY,
    DROP_NOT_RANKABLE,
    DROP_SKIPPED,
    DROP_TRUNCATED,
)
from src.ranker.metrics import RankerMetrics
from src.ranker.models import RankResult, ScoredItem
from src.ranker.scorer import compute_score
from src.store.models import NormalizedItem


logger = structlog.get_logger()


def _rank(
    pool: Iterable[NormalizedItem],
    top_n: int,
    skip_ids: Collection[str],
    exclude_categories: Iterable[str],
    now: datetime,
) -> RankResult:
    dropped = dict.fromkeys(
        (
            DROP_DUPLICATE,
            DROP_SKIPPED,
            DROP_EXCLUDED_CATEGORY,
            DROP_NOT_RANKABLE,
            DROP_TRUNCATED,
        ),
        0,
    )
    excluded = {category.lower() for category in exclude_categories}

    # First occurrence wins.
    unique: dict[str, NormalizedItem] = {}
    items_in = 0
    for item in pool:
        items_in += 1
        if item.id in unique:
            dropped[DROP_DUPLICATE] += 1
            continue
        unique[item.id] = item

    scored: list[ScoredItem] = []
    for item in unique.values():
        if item.id in skip_ids:
            dropped[DROP_SKIPPED] += 1
            continue
        if item.category.lower() in excluded:
            dropped[DROP_EXCLUDED_CATEGORY] += 1
            continue
        score = compute_score(item, now)
        if score <= 0:
            dropped[DROP_NOT_RANKABLE] += 1
            continue
        scored.append(ScoredItem(item=item, score=score))

    # list.sort is stable: equal scores keep pool order.
    scored.sort(key=lambda s: s.score, reverse=True)

    limit = max(top_n, 0)
    dropped[DROP_TRUNCATED] = max(len(scored) - limit, 0)
    return RankResult(
        ranked=scored[:limit],
        items_in=items_in,
        dropped_by_reason=dropped,
    )


def rank_items(
    pool: Iterable[NormalizedItem],
    top_n: int,
    skip_ids: Collection[str] = frozenset(),
    exclude_categories: Iterable[str] = (),
    now: datetime | None = None,
) -> list[ScoredItem]:
    """Rank a candidate pool by gravity-decayed engagement.

    Pure function with no logging or metrics side effects.

    Args:
        pool: Candidate items; earlier entries win id collisions.
        top_n: Maximum number of results. ``top_n <= 0`` returns nothing.
        skip_ids: Ids that must not appear in the output.
        exclude_categories: Categories to drop, compared case-insensitively.
        now: Reference time for decay. Defaults to the current UTC time.

    Returns:
        Scored items in descending score order.
    """
    return _rank(
        pool, top_n, skip_ids, exclude_categories, now or datetime.now(UTC)
    ).ranked


class ItemRanker:
    """Ranker with logging and metrics for use inside a pipeline run."""

    def __init__(
        self,
        run_id: str,
        metrics: RankerMetrics | None = None,
        now: datetime | None = None,
    ) -> None:
        """Initialize the ranker.

        Args:
            run_id: Run identifier for logging.
            metrics: Optional metrics instance.
            now: Reference time for decay. Defaults to construction time.
        """
        self._run_id = run_id
        self._now = now or datetime.now(UTC)
        self._metrics = metrics or RankerMetrics.get_instance()
        self._log = logger.bind(component="ranker", run_id=run_id)

    def rank(
        self,
        source: str,
        pool: Iterable[NormalizedItem],
        top_n: int,
        skip_ids: Collection[str] = frozenset(),
        exclude_categories: Iterable[str] = (),
    ) -> RankResult:
        """Rank one source's pool.

        Args:
            source: Source name for logging.
            pool: Candidate items.
            top_n: Maximum number of results.
            skip_ids: Ids already published or otherwise suppressed.
            exclude_categories: Categories to drop.

        Returns:
            RankResult with the ranked list and drop statistics.
        """
        result = _rank(pool, top_n, skip_ids, exclude_categories, self._now)

        self._metrics.record_run(result.items_in, result.items_out)
        self._metrics.record_drops(result.dropped_by_reason)
        for scored in result.ranked:
            self._metrics.record_score(scored.score)

        self._log.info(
            "ranker_complete",
            source=source,
            items_in=result.items_in,
            items_out=result.items_out,
            skip_ids=len(skip_ids),
            **{f"dropped_{k}": v for k, v in result.dropped_by_reason.items() if v},
        )
        return result
