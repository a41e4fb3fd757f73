"""Full-text extraction through the Jina reader service."""

import re

import structlog

from src.fetch.client import HttpFetcher
from src.fetch.models import FetchFailedError


logger = structlog.get_logger()

JINA_READER_PREFIX = "https://r.jina.ai/"

# Header lines the reader prepends to its markdown output
_READER_HEADERS = (
    re.compile(r"^Title:.*\n", re.IGNORECASE),
    re.compile(r"^URL Source:.*\n", re.IGNORECASE),
    re.compile(r"^Markdown Content:\n", re.IGNORECASE),
)


def strip_reader_headers(text: str) -> str:
    """Remove the leading reader header block and surrounding whitespace."""
    for pattern in _READER_HEADERS:
        text = pattern.sub("", text, count=1)
    return text.strip()


class JinaReader:
    """Turns an article URL into cleaned markdown text.

    Failures of any kind produce an empty string so callers can keep
    whatever content the item already had.
    """

    def __init__(
        self,
        http_client: HttpFetcher,
        run_id: str = "",
        prefix: str = JINA_READER_PREFIX,
    ) -> None:
        self._http_client = http_client
        self._prefix = prefix
        self._log = logger.bind(component="extractor", run_id=run_id)

    @property
    def http_client(self) -> HttpFetcher:
        """HTTP client the reader fetches through."""
        return self._http_client

    def extract(self, url: str, max_length: int | None, timeout: float) -> str:
        """Fetch the readable text of a page.

        Args:
            url: Article URL.
            max_length: Maximum characters to keep. None keeps everything.
            timeout: Per-call timeout in seconds.

        Returns:
            Cleaned text, or "" when extraction failed.
        """
        try:
            text = self._http_client.get_text(
                "jina",
                f"{self._prefix}{url}",
                extra_headers={"Accept": "text/markdown"},
                timeout=timeout,
            )
        except FetchFailedError as e:
            self._log.debug(
                "extract_failed", url=url, error_class=e.error.error_class.value
            )
            return ""

        cleaned = strip_reader_headers(text)
        if max_length is not None:
            cleaned = cleaned[:max_length]
        return cleaned
