"""V2EX collector (v1 public feeds, v2 node API)."""

from typing import Any

from src.collectors.base import BaseCollector, timestamp_from_unix, topics_from_payload
from src.collectors.constants import (
    PLATFORM_V2EX,
    V2EX_FALLBACK_FEED,
    V2EX_MAX_QPS,
    V2EX_PAGE_CONCURRENCY,
    V2EX_TIMEOUT_SECONDS,
    V2EX_TOPIC_URL,
    V2EX_V1_BASE_URL,
    V2EX_V1_FEEDS,
    V2EX_V2_BASE_URL,
)
from src.collectors.html import strip_html
from src.fetch.client import HttpFetcher
from src.fetch.constants import HTTP_STATUS_NOT_FOUND
from src.fetch.pool import run_bounded
from src.fetch.rate_limiter import TokenBucketRateLimiter, get_platform_rate_limiter
from src.store.models import NormalizedItem, Source


def normalize_topic(raw: dict[str, Any]) -> NormalizedItem:
    """Convert a V2EX topic into a NormalizedItem.

    V2EX has no vote count, so ``points`` mirrors ``replies``.
    """
    topic_id = str(raw["id"])
    replies = int(raw.get("replies") or 0)
    node = raw.get("node") or {}
    member = raw.get("member") or {}
    return NormalizedItem(
        id=topic_id,
        source=Source.V2EX,
        title=raw.get("title") or "",
        url=raw.get("url") or V2EX_TOPIC_URL.format(id=topic_id),
        content=strip_html(raw.get("content_rendered") or raw.get("content") or ""),
        category=node.get("name") or "",
        author=member.get("username") or "",
        points=replies,
        replies=replies,
        created_at=timestamp_from_unix(raw.get("created")),
    )


def auth_headers(token: str) -> dict[str, str]:
    """Bearer authorization header for the v2 API."""
    return {"Authorization": f"Bearer {token}"}


class V2exCollector(BaseCollector):
    """Collects the public hot/latest feeds or paginated node listings.

    Node listings need a personal access token; without one the
    collector falls back to the hot feed.
    """

    source = Source.V2EX

    def __init__(
        self,
        http_client: HttpFetcher,
        run_id: str = "",
        v1_base_url: str = V2EX_V1_BASE_URL,
        v2_base_url: str = V2EX_V2_BASE_URL,
        rate_limiter: TokenBucketRateLimiter | None = None,
    ) -> None:
        """Initialize the V2EX collector.

        Args:
            http_client: Shared HTTP client.
            run_id: Run identifier for logging.
            v1_base_url: Base URL of the public API.
            v2_base_url: Base URL of the token API.
            rate_limiter: Optional limiter (defaults to the shared V2EX one).
        """
        super().__init__(http_client, run_id)
        self._v1_base_url = v1_base_url.rstrip("/")
        self._v2_base_url = v2_base_url.rstrip("/")
        self._rate_limiter = rate_limiter or get_platform_rate_limiter(
            PLATFORM_V2EX, V2EX_MAX_QPS
        )

    def collect(self, source: str, token: str, pages: int = 1) -> list[NormalizedItem]:
        """Collect topics from a feed or node.

        Args:
            source: ``hot``, ``latest`` or a node name.
            token: v2 API token (may be empty).
            pages: Pages to read for a node.

        Returns:
            Normalized topics, de-duplicated by id.

        Raises:
            CollectorError: If a public feed cannot be fetched.
        """
        if source in V2EX_V1_FEEDS:
            return self._collect_feed(source)

        if not token:
            self._log.warning(
                "v2ex_token_missing", node=source, fallback=V2EX_FALLBACK_FEED
            )
            return self._collect_feed(V2EX_FALLBACK_FEED)

        return self._collect_node(source, token, pages)

    def _collect_feed(self, feed: str) -> list[NormalizedItem]:
        self._rate_limiter.acquire()
        payload = self.fetch_feed_json(
            feed,
            f"{self._v1_base_url}{V2EX_V1_FEEDS[feed]}",
            timeout=V2EX_TIMEOUT_SECONDS,
        )
        items = [
            normalize_topic(raw)
            for raw in topics_from_payload(payload)
            if raw.get("id") is not None
        ]
        self._log.info("v2ex_feed_collected", feed=feed, collected=len(items))
        return items

    def _collect_node(self, node: str, token: str, pages: int) -> list[NormalizedItem]:
        headers = auth_headers(token)

        def fetch_page(page: int) -> tuple[int, list[NormalizedItem]] | None:
            self._rate_limiter.acquire()
            payload = self._http_client.get_json(
                f"{self.source.value}:{node}",
                f"{self._v2_base_url}/nodes/{node}/topics?p={page}",
                extra_headers=headers,
                timeout=V2EX_TIMEOUT_SECONDS,
                allow_status={HTTP_STATUS_NOT_FOUND},
            )
            topics = topics_from_payload(payload)
            if not topics:
                return None
            return page, [
                normalize_topic(raw) for raw in topics if raw.get("id") is not None
            ]

        results = run_bounded(
            list(range(1, max(pages, 1) + 1)),
            V2EX_PAGE_CONCURRENCY,
            fetch_page,
            label="v2ex-pages",
        )
        results.sort(key=lambda pair: pair[0])

        # First occurrence wins when a topic shifts between pages.
        seen: set[str] = set()
        items: list[NormalizedItem] = []
        for _, page_items in results:
            for item in page_items:
                if item.id in seen:
                    continue
                seen.add(item.id)
                items.append(item)

        self._log.info(
            "v2ex_node_collected",
            node=node,
            pages_requested=pages,
            pages_returned=len(results),
            collected=len(items),
        )
        return items
