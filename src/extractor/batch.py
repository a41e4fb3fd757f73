"""Batch extraction of article bodies for ranked items."""

from collections.abc import Sequence
from urllib.parse import urlparse

import structlog

from src.config.schemas.app import ExtractorConfig
from src.extractor.reader import JinaReader
from src.fetch.pool import run_bounded
from src.store.models import NormalizedItem


logger = structlog.get_logger()

DISCUSSION_HOSTS = ("news.ycombinator.com", "v2ex.com")


def is_discussion_url(url: str) -> bool:
    """True for discussion pages and URLs that cannot be parsed.

    Discussion pages have no external article to read.
    """
    try:
        host = (urlparse(url).hostname or "").lower()
    except ValueError:
        return True
    if not host:
        return True
    return any(marker in host for marker in DISCUSSION_HOSTS)


def extract_batch(
    items: Sequence[NormalizedItem],
    reader: JinaReader,
    config: ExtractorConfig,
    max_length: int | None = None,
) -> list[NormalizedItem]:
    """Fill in article text for items that link to an external page.

    Items pointing at discussion pages, or that already carry content,
    are left alone. Extraction failures keep the original item.

    Args:
        items: Ranked items.
        reader: Extraction backend.
        config: Concurrency and timeout settings.
        max_length: Character cap for the extracted text. None is unbounded.

    Returns:
        Items in input order, with ``content`` filled where extraction worked.
    """
    log = logger.bind(component="extractor")
    pending = [
        (index, item)
        for index, item in enumerate(items)
        if not item.content and not is_discussion_url(item.url)
    ]
    if not pending:
        return list(items)

    def work(unit: tuple[int, NormalizedItem]) -> tuple[int, NormalizedItem] | None:
        index, item = unit
        # Read one extra character to know whether the text was cut.
        probe = None if max_length is None else max_length + 1
        text = reader.extract(item.url, probe, config.timeout)
        if not text:
            log.debug("extract_empty", item_id=item.id)
            return None
        truncated = max_length is not None and len(text) > max_length
        if truncated:
            text = text[:max_length]
        log.debug("extract_ok", item_id=item.id, chars=len(text), truncated=truncated)
        return index, item.model_copy(
            update={"content": text, "content_truncated": truncated}
        )

    updated = dict(
        run_bounded(pending, config.concurrency, work, label="extract")
    )
    log.info("extract_batch_complete", requested=len(pending), extracted=len(updated))
    return [updated.get(index, item) for index, item in enumerate(items)]
