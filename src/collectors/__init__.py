"""Collectors for Hacker News and V2EX.

Each collector turns one upstream list or node into NormalizedItems.
The runner isolates failures per feed; the enricher appends V2EX topic
supplements after ranking.
"""

from src.collectors.enricher import enrich_v2ex_items, fetch_supplements
from src.collectors.errors import CollectorError, CollectorErrorClass, ErrorRecord
from src.collectors.hackernews import HackerNewsCollector, normalize_story
from src.collectors.html import strip_html
from src.collectors.metrics import CollectorMetrics
from src.collectors.runner import CollectorRunner, FetchAllResult
from src.collectors.v2ex import V2exCollector, normalize_topic


__all__ = [
    "CollectorError",
    "CollectorErrorClass",
    "CollectorMetrics",
    "CollectorRunner",
    "ErrorRecord",
    "FetchAllResult",
    "HackerNewsCollector",
    "V2exCollector",
    "enrich_v2ex_items",
    "fetch_supplements",
    "normalize_story",
    "normalize_topic",
    "strip_html",
]
