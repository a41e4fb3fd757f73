"""Hacker News collector (Firebase API)."""

from typing import Any

from src.collectors.base import BaseCollector, timestamp_from_unix
from src.collectors.constants import (
    HN_API_BASE_URL,
    HN_DEFAULT_LIST,
    HN_DETAIL_CONCURRENCY,
    HN_DETAIL_TIMEOUT_SECONDS,
    HN_ITEM_URL,
    HN_LIST_ENDPOINTS,
)
from src.collectors.errors import CollectorError, CollectorErrorClass
from src.collectors.html import strip_html
from src.fetch.client import HttpFetcher
from src.fetch.pool import run_bounded_ordered
from src.store.models import NormalizedItem, Source


def list_endpoint(list_name: str) -> str:
    """Map a list name to its API endpoint. Unknown names read ``top``."""
    return HN_LIST_ENDPOINTS.get(
        list_name.lower(), HN_LIST_ENDPOINTS[HN_DEFAULT_LIST]
    )


def normalize_story(raw: dict[str, Any]) -> NormalizedItem:
    """Convert a Firebase item into a NormalizedItem.

    Stories titled ``Ask HN:`` or ``Show HN:`` are categorised as
    ``ask`` and ``show``; other items keep their lower-cased type.
    """
    item_id = str(raw["id"])
    title = raw.get("title") or ""
    url = (raw.get("url") or "").strip() or HN_ITEM_URL.format(id=item_id)

    category = (raw.get("type") or "story").lower()
    if category == "story":
        lowered = title.lower().strip()
        if lowered.startswith("ask hn:"):
            category = "ask"
        elif lowered.startswith("show hn:"):
            category = "show"

    kids = raw.get("kids") or []
    return NormalizedItem(
        id=item_id,
        source=Source.HACKERNEWS,
        title=title,
        url=url,
        content=strip_html(raw.get("text") or ""),
        category=category,
        author=raw.get("by") or "",
        points=int(raw.get("score") or 0),
        replies=max(int(raw.get("descendants") or 0), len(kids)),
        created_at=timestamp_from_unix(raw.get("time")),
    )


class HackerNewsCollector(BaseCollector):
    """Reads a story list and the details of its first ``limit`` stories.

    Details are fetched through the bounded pool; stories whose detail
    request fails or returns null are dropped.
    """

    source = Source.HACKERNEWS

    def __init__(
        self,
        http_client: HttpFetcher,
        run_id: str = "",
        base_url: str = HN_API_BASE_URL,
        concurrency: int = HN_DETAIL_CONCURRENCY,
    ) -> None:
        super().__init__(http_client, run_id)
        self._base_url = base_url.rstrip("/")
        self._concurrency = concurrency

    def collect(self, list_name: str, limit: int) -> list[NormalizedItem]:
        """Collect stories from one list.

        Args:
            list_name: top, new, best, ask, show or job.
            limit: Number of ids to read from the head of the list.

        Returns:
            Normalized stories in list order.

        Raises:
            CollectorError: If the id list itself cannot be fetched.
        """
        endpoint = list_endpoint(list_name)
        ids = self.fetch_feed_json(list_name, f"{self._base_url}/{endpoint}.json")
        if not isinstance(ids, list):
            raise CollectorError(
                CollectorErrorClass.SCHEMA,
                f"Expected an id array from {endpoint}",
                source_id=f"{self.source.value}:{list_name}",
            )

        head = ids[: max(limit, 0)]
        items = run_bounded_ordered(
            head, self._concurrency, self._fetch_story, label="hn-items"
        )
        self._log.info(
            "hn_list_collected",
            list_name=list_name,
            requested=len(head),
            collected=len(items),
        )
        return items

    def _fetch_story(self, story_id: Any) -> NormalizedItem | None:
        raw = self._http_client.get_json(
            f"{self.source.value}:item",
            f"{self._base_url}/item/{story_id}.json",
            timeout=HN_DETAIL_TIMEOUT_SECONDS,
        )
        if not isinstance(raw, dict) or raw.get("id") is None:
            return None
        return normalize_story(raw)
