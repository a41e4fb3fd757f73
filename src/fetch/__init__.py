"""HTTP fetch layer with retries, bounded concurrency and rate limiting.

This module provides:
- ``HttpFetcher`` for GET requests with retry and size limits
- ``run_bounded`` / ``run_bounded_ordered`` fail-soft worker pools
- ``TokenBucketRateLimiter`` for per-platform QPS control
- Header redaction and metrics collection
"""

from src.fetch.client import HttpFetcher
from src.fetch.config import FetchConfig
from src.fetch.metrics import FetchMetrics, PoolMetrics
from src.fetch.models import (
    FetchError,
    FetchErrorClass,
    FetchFailedError,
    FetchResult,
    ResponseSizeExceededError,
    RetryPolicy,
)
from src.fetch.pool import run_bounded, run_bounded_ordered
from src.fetch.rate_limiter import (
    TokenBucketRateLimiter,
    get_platform_rate_limiter,
    reset_platform_rate_limiters,
)
from src.fetch.redact import redact_headers, redact_url_credentials


__all__ = [
    # Client
    "HttpFetcher",
    # Config
    "FetchConfig",
    # Models
    "FetchResult",
    "FetchError",
    "FetchErrorClass",
    "FetchFailedError",
    "RetryPolicy",
    "ResponseSizeExceededError",
    # Pool
    "run_bounded",
    "run_bounded_ordered",
    # Rate limiting
    "TokenBucketRateLimiter",
    "get_platform_rate_limiter",
    "reset_platform_rate_limiters",
    # Metrics
    "FetchMetrics",
    "PoolMetrics",
    # Redaction
    "redact_headers",
    "redact_url_credentials",
]
