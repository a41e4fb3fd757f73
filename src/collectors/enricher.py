"""V2EX content enrichment with topic supplements (附言)."""

from collections.abc import Sequence
from typing import Any

import structlog

from src.collectors.constants import (
    SUPPLEMENT_HEADER,
    V2EX_TIMEOUT_SECONDS,
    V2EX_V2_BASE_URL,
)
from src.collectors.html import strip_html
from src.collectors.metrics import CollectorMetrics
from src.collectors.v2ex import auth_headers
from src.extractor.reader import JinaReader
from src.fetch.client import HttpFetcher
from src.fetch.models import FetchFailedError
from src.fetch.pool import run_bounded
from src.store.models import NormalizedItem


logger = structlog.get_logger()


def format_supplements(supplements: Sequence[dict[str, Any]]) -> str:
    """Render supplements as numbered text blocks."""
    return "".join(
        SUPPLEMENT_HEADER.format(n=n)
        + strip_html(entry.get("content_rendered") or entry.get("content") or "")
        for n, entry in enumerate(supplements, start=1)
    )


def fetch_supplements(
    http_client: HttpFetcher,
    topic_id: str,
    token: str,
    timeout: float = V2EX_TIMEOUT_SECONDS,
    base_url: str = V2EX_V2_BASE_URL,
) -> list[dict[str, Any]] | None:
    """Read a topic's supplements from the v2 API.

    Returns:
        Supplement objects (possibly empty), or None when the request failed.
    """
    try:
        payload = http_client.get_json(
            "v2ex:topic",
            f"{base_url.rstrip('/')}/topics/{topic_id}",
            extra_headers=auth_headers(token),
            timeout=timeout,
        )
    except FetchFailedError:
        return None

    if not isinstance(payload, dict):
        return None
    result = payload.get("result") or payload
    supplements = result.get("supplements") if isinstance(result, dict) else None
    if not isinstance(supplements, list):
        return []
    return [entry for entry in supplements if isinstance(entry, dict)]


def enrich_v2ex_items(
    items: Sequence[NormalizedItem],
    fetcher: HttpFetcher,
    token: str,
    concurrency: int,
    max_length: int | None,
    timeout: float,
    reader: JinaReader | None = None,
) -> list[NormalizedItem]:
    """Append supplements to V2EX topics, falling back to page extraction.

    With a token, each topic's supplements are appended to its content as
    ``--- 附言 N ---`` blocks. Topics without supplements (or without a
    token) are read through the full-text extractor instead. Topics where
    both come back empty are left unchanged.

    Args:
        items: Ranked V2EX items.
        fetcher: Shared HTTP client.
        token: v2 API token (may be empty).
        concurrency: Bounded pool size.
        max_length: Cap on the resulting content. None is unbounded.
        timeout: Per-call timeout in seconds.
        reader: Extraction backend (built from ``fetcher`` when omitted).

    Returns:
        Items in input order.
    """
    if not items:
        return []

    log = logger.bind(component="enricher")
    reader = reader or JinaReader(fetcher)

    def work(unit: tuple[int, NormalizedItem]) -> tuple[int, NormalizedItem] | None:
        index, item = unit
        supplements = (
            fetch_supplements(fetcher, item.id, token, timeout) if token else None
        )
        if supplements:
            content = item.content + format_supplements(supplements)
            if max_length is not None:
                content = content[:max_length]
            log.debug("enrich_supplements", item_id=item.id, count=len(supplements))
            return index, item.model_copy(update={"content": content})

        text = reader.extract(item.url, max_length, timeout)
        if text:
            log.debug("enrich_extracted", item_id=item.id, chars=len(text))
            return index, item.model_copy(update={"content": text})

        log.debug("enrich_skipped", item_id=item.id)
        return None

    updated = dict(
        run_bounded(list(enumerate(items)), concurrency, work, label="enrich")
    )
    CollectorMetrics.get_instance().record_enriched(len(updated))
    log.info("enrich_complete", requested=len(items), enriched=len(updated))
    return [updated.get(index, item) for index, item in enumerate(items)]
