"""Unit tests for the Jina reader client."""

import httpx

from src.extractor.reader import JinaReader, strip_reader_headers
from tests.helpers.http import mock_fetcher


class TestStripReaderHeaders:
    """Tests for strip_reader_headers."""

    def test_removes_header_block(self) -> None:
        """Test that Title/URL Source/Markdown Content lines are removed."""
        text = (
            "Title: Example\n"
            "URL Source: https://example.com\n"
            "Markdown Content:\n"
            "Body text here."
        )

        assert strip_reader_headers(text) == "Body text here."

    def test_leaves_plain_text(self) -> None:
        """Test text without headers is only trimmed."""
        assert strip_reader_headers("  plain  ") == "plain"


class TestJinaReader:
    """Tests for JinaReader.extract."""

    def test_requests_markdown_through_prefix(self) -> None:
        """Test the reader URL and Accept header."""
        seen: dict[str, str] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["accept"] = request.headers["accept"]
            return httpx.Response(200, text="Title: X\nhello")

        reader = JinaReader(mock_fetcher(handler))

        text = reader.extract("https://example.com/post", None, timeout=5)

        assert text == "hello"
        assert seen["url"] == "https://r.jina.ai/https://example.com/post"
        assert seen["accept"] == "text/markdown"

    def test_truncates(self) -> None:
        """Test the max_length cap."""
        reader = JinaReader(
            mock_fetcher(lambda request: httpx.Response(200, text="abcdefghij"))
        )

        assert reader.extract("https://example.com", 4, timeout=5) == "abcd"

    def test_failure_returns_empty(self) -> None:
        """Test that any failure yields an empty string."""
        reader = JinaReader(mock_fetcher(lambda request: httpx.Response(451)))

        assert reader.extract("https://example.com", None, timeout=5) == ""

    def test_exposes_http_client(self) -> None:
        """Test that the shared client is reachable for other callers."""
        fetcher = mock_fetcher(lambda request: httpx.Response(200))

        assert JinaReader(fetcher).http_client is fetcher
