"""Unit tests for the Hacker News collector."""

from datetime import UTC, datetime
from typing import Any

import httpx
import pytest

from src.collectors.errors import CollectorError, CollectorErrorClass
from src.collectors.hackernews import (
    HackerNewsCollector,
    list_endpoint,
    normalize_story,
)
from src.store.models import Source
from tests.helpers.http import mock_fetcher, route_json


def story(item_id: int, **fields: Any) -> dict[str, Any]:
    """Firebase story payload."""
    payload: dict[str, Any] = {
        "id": item_id,
        "type": "story",
        "title": f"Story {item_id}",
        "url": f"https://example.com/{item_id}",
        "by": "pg",
        "score": 100,
        "descendants": 12,
        "time": 1_772_366_400,
    }
    payload.update(fields)
    return payload


class TestListEndpoint:
    """Tests for list name mapping."""

    @pytest.mark.parametrize(
        ("name", "endpoint"),
        [("top", "topstories"), ("NEW", "newstories"), ("job", "jobstories")],
    )
    def test_known_lists(self, name: str, endpoint: str) -> None:
        """Test known list names."""
        assert list_endpoint(name) == endpoint

    def test_unknown_falls_back_to_top(self) -> None:
        """Test that unknown names read the top list."""
        assert list_endpoint("trending") == "topstories"


class TestNormalizeStory:
    """Tests for normalize_story."""

    def test_fields(self) -> None:
        """Test the basic field mapping."""
        item = normalize_story(story(8863))

        assert item.id == "8863"
        assert item.source == Source.HACKERNEWS
        assert item.points == 100
        assert item.replies == 12
        assert item.author == "pg"
        assert item.category == "story"
        assert item.created_at == datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

    def test_missing_url_uses_discussion(self) -> None:
        """Test that text posts link to their discussion page."""
        item = normalize_story(story(1, url=None))

        assert item.url == "https://news.ycombinator.com/item?id=1"

    @pytest.mark.parametrize(
        ("title", "category"),
        [("Ask HN: Who is hiring?", "ask"), ("Show HN: My app", "show")],
    )
    def test_ask_show_categories(self, title: str, category: str) -> None:
        """Test categories derived from the title prefix."""
        assert normalize_story(story(1, title=title)).category == category

    def test_job_type(self) -> None:
        """Test non-story types keep their lower-cased type."""
        assert normalize_story(story(1, type="Job")).category == "job"

    def test_replies_uses_larger_count(self) -> None:
        """Test replies = max(descendants, len(kids))."""
        item = normalize_story(story(1, descendants=2, kids=[10, 11, 12, 13]))

        assert item.replies == 4

    def test_text_is_stripped(self) -> None:
        """Test that HTML text becomes plain content."""
        item = normalize_story(story(1, text="<p>Hello &amp; welcome</p>"))

        assert item.content == "Hello & welcome"


class TestHackerNewsCollector:
    """Tests for HackerNewsCollector.collect."""

    def test_collects_in_list_order(self) -> None:
        """Test that details come back in id-list order up to the limit."""
        routes: dict[str, object] = {"/v0/topstories.json": [3, 1, 2, 4]}
        for item_id in (1, 2, 3, 4):
            routes[f"/v0/item/{item_id}.json"] = story(item_id)
        collector = HackerNewsCollector(mock_fetcher(route_json(routes)), "test-run")

        items = collector.collect("top", limit=3)

        assert [item.id for item in items] == ["3", "1", "2"]

    def test_failed_and_null_details_dropped(self) -> None:
        """Test that a 500 detail and a null detail are skipped."""
        routes: dict[str, object] = {
            "/v0/newstories.json": [1, 2, 3],
            "/v0/item/1.json": story(1),
            "/v0/item/2.json": httpx.Response(500),
            "/v0/item/3.json": None,
        }
        collector = HackerNewsCollector(mock_fetcher(route_json(routes)), "test-run")

        items = collector.collect("new", limit=10)

        assert [item.id for item in items] == ["1"]

    def test_list_failure_raises(self) -> None:
        """Test that an unavailable id list fails the whole feed."""
        collector = HackerNewsCollector(mock_fetcher(route_json({})), "test-run")

        with pytest.raises(CollectorError) as exc_info:
            collector.collect("top", limit=5)

        assert exc_info.value.error_class == CollectorErrorClass.FETCH
        assert exc_info.value.source_id == "hackernews:top"

    def test_non_list_payload(self) -> None:
        """Test that a malformed id list is a schema error."""
        routes: dict[str, object] = {"/v0/topstories.json": {"oops": True}}
        collector = HackerNewsCollector(mock_fetcher(route_json(routes)), "test-run")

        with pytest.raises(CollectorError) as exc_info:
            collector.collect("top", limit=5)

        assert exc_info.value.error_class == CollectorErrorClass.SCHEMA
