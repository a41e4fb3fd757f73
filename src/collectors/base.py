"""Shared collector plumbing."""

from datetime import UTC, datetime
from typing import Any, ClassVar

import structlog

from src.collectors.errors import CollectorError, CollectorErrorClass
from src.fetch.client import HttpFetcher
from src.fetch.models import FetchFailedError
from src.store.models import Source


logger = structlog.get_logger()


def timestamp_from_unix(value: Any) -> datetime:
    """Convert unix seconds to an aware UTC datetime.

    Missing or malformed values map to the epoch, which ranks as very old.
    """
    try:
        seconds = float(value or 0)
    except (TypeError, ValueError):
        seconds = 0.0
    return datetime.fromtimestamp(seconds, tz=UTC)


def topics_from_payload(payload: Any) -> list[dict[str, Any]]:
    """Accept both a bare list and a ``{"result": [...]}`` envelope."""
    if isinstance(payload, dict):
        payload = payload.get("result") or []
    if not isinstance(payload, list):
        return []
    return [entry for entry in payload if isinstance(entry, dict)]


class BaseCollector:
    """Base class for upstream collectors.

    Subclasses set ``source`` and implement ``collect``.
    """

    source: ClassVar[Source]

    def __init__(self, http_client: HttpFetcher, run_id: str = "") -> None:
        """Initialize the collector.

        Args:
            http_client: Shared HTTP client.
            run_id: Run identifier for logging.
        """
        self._http_client = http_client
        self._run_id = run_id
        self._log = logger.bind(
            component="collector", source=self.source.value, run_id=run_id
        )

    def fetch_feed_json(
        self,
        feed: str,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Fetch a list-level JSON document.

        Raises:
            CollectorError: FETCH when the request fails or the body is not JSON.
        """
        try:
            return self._http_client.get_json(
                f"{self.source.value}:{feed}", url, headers, timeout
            )
        except FetchFailedError as e:
            raise CollectorError(
                CollectorErrorClass.FETCH,
                str(e),
                source_id=f"{self.source.value}:{feed}",
                details={
                    "fetch_error_class": e.error.error_class.value,
                    "status_code": e.error.status_code,
                },
            ) from e
