"""Unit tests for the accumulation store."""

import json
from pathlib import Path

import pytest

from src.store.errors import InvalidDayError, SourceMismatchError
from src.store.metrics import StoreMetrics
from src.store.models import Source
from src.store.pool_store import AccumulationStore
from tests.helpers.items import make_item
from tests.helpers.time import FIXED_DAY, FIXED_NOW, hours_before


@pytest.fixture(autouse=True)
def reset_metrics() -> None:
    """Start each test with fresh store metrics."""
    StoreMetrics.reset()


@pytest.fixture
def store(tmp_path: Path) -> AccumulationStore:
    """Hacker News store in a temporary directory."""
    return AccumulationStore(tmp_path / "hackernews", Source.HACKERNEWS, "test-run")


class TestMerge:
    """Tests for merge semantics."""

    def test_first_merge_creates_snapshot(self, store: AccumulationStore) -> None:
        """Test that the first merge writes the day's file."""
        result = store.merge(FIXED_DAY, [make_item("1"), make_item("2")], now=FIXED_NOW)

        assert result.items_new == 2
        assert result.items_updated == 0
        assert result.pool_size == 2
        assert store.snapshot_path(FIXED_DAY).exists()

    def test_merge_is_idempotent(self, store: AccumulationStore) -> None:
        """Test that merging the same input twice equals merging it once."""
        items = [make_item("1"), make_item("2")]
        store.merge(FIXED_DAY, items, now=FIXED_NOW)
        once = store.load(FIXED_DAY)

        store.merge(FIXED_DAY, items, now=FIXED_NOW)
        twice = store.load(FIXED_DAY)

        assert sorted(twice, key=lambda i: i.id) == sorted(once, key=lambda i: i.id)

    def test_upsert_replaces_by_id(self, store: AccumulationStore) -> None:
        """Test that a re-fetched item overwrites the stored copy."""
        store.merge(FIXED_DAY, [make_item("1", replies=3)], now=FIXED_NOW)
        store.merge(FIXED_DAY, [make_item("1", replies=42)], now=FIXED_NOW)

        items = store.load(FIXED_DAY)

        assert len(items) == 1
        assert items[0].replies == 42

    def test_runs_accumulate(self, store: AccumulationStore) -> None:
        """Test that separate runs on one day add up."""
        store.merge(FIXED_DAY, [make_item("1")], now=FIXED_NOW)
        result = store.merge(FIXED_DAY, [make_item("2")], now=FIXED_NOW)

        assert result.pool_size == 2
        assert {item.id for item in store.load(FIXED_DAY)} == {"1", "2"}

    def test_created_at_is_immutable(self, store: AccumulationStore) -> None:
        """Test that a merge never changes the stored publication time."""
        original = hours_before(5)
        store.merge(FIXED_DAY, [make_item("1", created_at=original)], now=FIXED_NOW)
        store.merge(
            FIXED_DAY, [make_item("1", created_at=hours_before(1))], now=FIXED_NOW
        )

        assert store.load(FIXED_DAY)[0].created_at == original

    def test_empty_merge_writes_empty_snapshot(self, store: AccumulationStore) -> None:
        """Test that merging nothing is safe."""
        result = store.merge(FIXED_DAY, [], now=FIXED_NOW)

        assert result.pool_size == 0
        assert store.load(FIXED_DAY) == []

    def test_source_mismatch(self, store: AccumulationStore) -> None:
        """Test that another source's item is rejected."""
        with pytest.raises(SourceMismatchError):
            store.merge(FIXED_DAY, [make_item("1", source=Source.V2EX)])

    def test_invalid_day(self, store: AccumulationStore) -> None:
        """Test that a malformed day key is rejected."""
        with pytest.raises(InvalidDayError):
            store.merge("yesterday", [make_item("1")])

    def test_snapshot_format(self, store: AccumulationStore) -> None:
        """Test the persisted layout uses camelCase keys."""
        store.merge(FIXED_DAY, [make_item("1")], now=FIXED_NOW)

        data = json.loads(store.snapshot_path(FIXED_DAY).read_text(encoding="utf-8"))

        assert data["date"] == FIXED_DAY
        assert data["fetchedAt"].startswith("2026-03-01T12:00:00")
        assert data["items"][0]["id"] == "1"
        assert "createdAt" in data["items"][0]


class TestLoad:
    """Tests for load and load_all."""

    def test_missing_snapshot_is_empty(self, store: AccumulationStore) -> None:
        """Test that a day without a file loads as empty."""
        assert store.load(FIXED_DAY) == []

    def test_corrupt_snapshot_is_empty(self, store: AccumulationStore) -> None:
        """Test that an unreadable file is treated as empty and counted."""
        path = store.snapshot_path(FIXED_DAY)
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")

        assert store.load(FIXED_DAY) == []
        assert StoreMetrics.get_instance().snapshots_corrupt_total == 1

    def test_invalid_schema_is_empty(self, store: AccumulationStore) -> None:
        """Test that a well-formed file with the wrong shape is treated as empty."""
        path = store.snapshot_path(FIXED_DAY)
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"items": "nope"}), encoding="utf-8")

        assert store.load(FIXED_DAY) == []

    def test_load_all_fresh_items_win(self, store: AccumulationStore) -> None:
        """Test the union with in-memory items, fresh copy winning ties."""
        store.merge(FIXED_DAY, [make_item("1", replies=1), make_item("2")], now=FIXED_NOW)

        combined = store.load_all(
            FIXED_DAY, [make_item("1", replies=99), make_item("3")]
        )

        by_id = {item.id: item for item in combined}
        assert set(by_id) == {"1", "2", "3"}
        assert by_id["1"].replies == 99

    def test_load_all_does_not_persist(self, store: AccumulationStore) -> None:
        """Test that load_all leaves the snapshot untouched."""
        store.load_all(FIXED_DAY, [make_item("1")])

        assert not store.snapshot_path(FIXED_DAY).exists()


class TestGetRecentIds:
    """Tests for the recently-seen id window."""

    def test_collects_within_window(self, store: AccumulationStore) -> None:
        """Test ids from snapshots written inside the window."""
        store.merge("2026-02-28", [make_item("old")], now=hours_before(30))
        store.merge("2026-03-01", [make_item("new")], now=hours_before(2))

        assert store.get_recent_ids(24, now=FIXED_NOW) == {"new"}
        assert store.get_recent_ids(48, now=FIXED_NOW) == {"old", "new"}

    def test_cutoff_is_exclusive(self, store: AccumulationStore) -> None:
        """Test that a snapshot written exactly at the cutoff is outside."""
        store.merge("2026-02-28", [make_item("edge")], now=hours_before(1.5))

        assert store.get_recent_ids(1.5, now=FIXED_NOW) == set()
        assert store.get_recent_ids(1.51, now=FIXED_NOW) == {"edge"}

    def test_exclude_day(self, store: AccumulationStore) -> None:
        """Test that one day's snapshot can be ignored."""
        store.merge("2026-02-28", [make_item("a")], now=hours_before(10))
        store.merge(FIXED_DAY, [make_item("b")], now=hours_before(1))

        assert store.get_recent_ids(24, exclude_day=FIXED_DAY, now=FIXED_NOW) == {"a"}

    def test_missing_directory(self, tmp_path: Path) -> None:
        """Test that a store with no files yields nothing."""
        store = AccumulationStore(tmp_path / "nothing", Source.V2EX)

        assert store.get_recent_ids(24, now=FIXED_NOW) == set()
