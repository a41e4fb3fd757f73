"""Gravity-decay scoring for ranked items."""

import math
from datetime import datetime

from src.ranker.constants import GRAVITY, HOUR_OFFSET, MIN_ENGAGEMENT, SECONDS_PER_HOUR
from src.store.models import NormalizedItem


def hours_since(created_at: datetime, now: datetime) -> float:
    """Age in hours, clamped at zero for timestamps in the future."""
    return max((now - created_at).total_seconds() / SECONDS_PER_HOUR, 0.0)


def compute_score(item: NormalizedItem, now: datetime) -> float:
    """Score an item as ``(e - 1) / (hours + 2) ** 1.8``.

    ``e`` is the item's engagement (points for Hacker News, replies for
    V2EX). Engagement of 1 or less scores 0. A non-finite result also
    scores 0 so the caller can drop it.

    Args:
        item: Item to score.
        now: Reference time for the age term.

    Returns:
        Score, always finite and non-negative.
    """
    engagement = item.engagement
    if engagement <= MIN_ENGAGEMENT:
        return 0.0

    age_hours = hours_since(item.created_at, now)
    score = (engagement - 1) / math.pow(age_hours + HOUR_OFFSET, GRAVITY)
    if not math.isfinite(score) or score < 0:
        return 0.0
    return score
