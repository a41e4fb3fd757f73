"""Constants for the time-decay ranker."""

# Exponent applied to the age term; higher values make scores fall faster.
GRAVITY: float = 1.8

# Hours added to every item's age so fresh items do not divide by zero.
HOUR_OFFSET: float = 2.0

# Engagement at or below this value is not rankable.
MIN_ENGAGEMENT: int = 1

SECONDS_PER_HOUR: float = 3600.0

# Drop reasons reported by the ranker
DROP_DUPLICATE = "duplicate"
DROP_SKIPPED = "skipped"
DROP_EXCLUDED_CATEGORY = "excluded_category"
DROP_NOT_RANKABLE = "not_rankable"
DROP_TRUNCATED = "truncated"
