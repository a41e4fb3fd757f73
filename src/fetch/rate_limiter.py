"""Token-bucket rate limiter shared across concurrent upstream calls."""

import threading
import time
from dataclasses import dataclass, field


@dataclass
class TokenBucketRateLimiter:
    """Token bucket rate limiter for API QPS control.

    Tokens are replenished continuously at ``max_qps``. Safe to share
    between the workers of a bounded pool.

    Attributes:
        max_qps: Maximum queries per second.
        bucket_capacity: Maximum tokens in the bucket (burst capacity).
            Defaults to ``max_qps`` when left at 0.
    """

    max_qps: float
    bucket_capacity: float = 0.0

    _tokens: float = field(init=False, default=0.0)
    _last_refill: float = field(init=False, default=0.0)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _waits: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        if self.max_qps <= 0:
            msg = f"max_qps must be positive, got {self.max_qps}"
            raise ValueError(msg)
        if self.bucket_capacity <= 0:
            self.bucket_capacity = self.max_qps
        self._tokens = self.bucket_capacity
        self._last_refill = time.monotonic()

    def _refill(self) -> None:
        """Refill tokens based on elapsed time. Caller holds the lock."""
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(self.bucket_capacity, self._tokens + elapsed * self.max_qps)
        self._last_refill = now

    def acquire(self, tokens: int = 1) -> None:
        """Block until ``tokens`` are available, then take them."""
        while True:
            with self._lock:
                self._refill()
                if self._tokens >= tokens:
                    self._tokens -= tokens
                    return
                wait_time = (tokens - self._tokens) / self.max_qps
                self._waits += 1
            time.sleep(wait_time)

    def try_acquire(self, tokens: int = 1) -> bool:
        """Take ``tokens`` if available without blocking.

        Returns:
            True if tokens were acquired, False otherwise.
        """
        with self._lock:
            self._refill()
            if self._tokens >= tokens:
                self._tokens -= tokens
                return True
            self._waits += 1
            return False

    @property
    def wait_count(self) -> int:
        """Number of times a caller had to wait or was refused."""
        with self._lock:
            return self._waits


_platform_limiters: dict[str, TokenBucketRateLimiter] = {}
_limiter_lock = threading.Lock()


def get_platform_rate_limiter(platform: str, max_qps: float) -> TokenBucketRateLimiter:
    """Get or create the shared rate limiter for a platform.

    Args:
        platform: Platform identifier (e.g. ``v2ex``).
        max_qps: Maximum queries per second, used on first creation.

    Returns:
        The platform's limiter.
    """
    with _limiter_lock:
        if platform not in _platform_limiters:
            _platform_limiters[platform] = TokenBucketRateLimiter(max_qps=max_qps)
        return _platform_limiters[platform]


def reset_platform_rate_limiters() -> None:
    """Drop all shared limiters (for testing)."""
    with _limiter_lock:
        _platform_limiters.clear()
