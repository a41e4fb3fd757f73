"""Per-source, per-day accumulation store backed by JSON snapshots."""

import uuid
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime, timedelta
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.store.days import validate_day_key
from src.store.errors import SnapshotCorruptError, SourceMismatchError
from src.store.io import read_json, write_json_atomic
from src.store.metrics import StoreMetrics
from src.store.models import DailyPool, NormalizedItem, Source


logger = structlog.get_logger()


class MergeResult(BaseModel):
    """Outcome of merging a batch into a day's snapshot."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    day: str
    items_new: int = Field(ge=0)
    items_updated: int = Field(ge=0)
    pool_size: int = Field(ge=0)


class AccumulationStore:
    """Durable pool of normalized items, one snapshot file per day.

    A day's pool is the union of everything fetched that day: every merge
    upserts by item id (last write wins) and rewrites the whole snapshot
    atomically. Snapshots are never deleted here.

    A data directory must be owned by a single process at a time; there is
    no file locking.
    """

    def __init__(
        self,
        data_dir: Path | str,
        source: Source,
        run_id: str | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            data_dir: Directory holding this source's ``<day>.json`` files.
            source: Source whose items this store owns.
            run_id: Optional run ID for logging context.
        """
        self._data_dir = Path(data_dir)
        self._source = source
        self._run_id = run_id or str(uuid.uuid4())
        self._metrics = StoreMetrics.get_instance()
        self._log = logger.bind(
            component="store",
            run_id=self._run_id,
            source=source.value,
        )

    @property
    def data_dir(self) -> Path:
        """Get the snapshot directory."""
        return self._data_dir

    @property
    def source(self) -> Source:
        """Get the owned source."""
        return self._source

    def snapshot_path(self, day: str) -> Path:
        """Get the snapshot path for a day.

        Args:
            day: Day key.

        Returns:
            Path of the day's snapshot file.
        """
        return self._data_dir / f"{validate_day_key(day)}.json"

    def merge(
        self,
        day: str,
        new_items: Sequence[NormalizedItem],
        now: datetime | None = None,
    ) -> MergeResult:
        """Upsert items into the day's snapshot and write it back.

        Existing entries with the same id are replaced wholesale by the
        fresh copy, except that the stored ``created_at`` is kept.
        Repeating a merge with the same input leaves the items unchanged.

        Args:
            day: Day key.
            new_items: Freshly fetched items for this source.
            now: Write timestamp (defaults to now).

        Returns:
            MergeResult with insert/update counts.

        Raises:
            InvalidDayError: If the day key is malformed.
            SourceMismatchError: If an item belongs to another source.
        """
        path = self.snapshot_path(day)
        for item in new_items:
            if item.source != self._source:
                raise SourceMismatchError(
                    self._source.value, item.source.value, item.id
                )

        now = now or datetime.now(UTC)
        existing = self._read_pool(path)
        merged = existing.as_mapping() if existing else {}

        items_new = 0
        items_updated = 0
        for item in new_items:
            previous = merged.get(item.id)
            if previous is None:
                items_new += 1
            else:
                items_updated += 1
                if previous.created_at != item.created_at:
                    self._log.warning(
                        "immutable_field_changed",
                        item_id=item.id,
                        field="created_at",
                    )
                    item = item.model_copy(update={"created_at": previous.created_at})
            merged[item.id] = item

        pool = DailyPool(date=day, fetched_at=now, items=list(merged.values()))
        bytes_written = write_json_atomic(
            path, pool.model_dump(mode="json", by_alias=True)
        )
        self._metrics.record_merge(items_new, items_updated, bytes_written)

        self._log.info(
            "pool_merged",
            day=day,
            items_in=len(new_items),
            items_new=items_new,
            items_updated=items_updated,
            pool_size=len(pool.items),
        )

        return MergeResult(
            day=day,
            items_new=items_new,
            items_updated=items_updated,
            pool_size=len(pool.items),
        )

    def load(self, day: str) -> list[NormalizedItem]:
        """Load the day's items.

        Args:
            day: Day key.

        Returns:
            Items of the snapshot, or an empty list when the snapshot is
            missing or unreadable.
        """
        pool = self._read_pool(self.snapshot_path(day))
        return list(pool.items) if pool else []

    def load_all(
        self,
        day: str,
        fresh_items: Iterable[NormalizedItem] = (),
    ) -> list[NormalizedItem]:
        """Union the persisted snapshot with in-memory items, without writing.

        Args:
            day: Day key.
            fresh_items: Items not yet merged; they win ties by id.

        Returns:
            Combined candidate pool.
        """
        combined = {item.id: item for item in self.load(day)}
        for item in fresh_items:
            combined[item.id] = item
        return list(combined.values())

    def get_recent_ids(
        self,
        hours: float,
        exclude_day: str | None = None,
        now: datetime | None = None,
    ) -> set[str]:
        """Collect ids from snapshots written within the trailing window.

        This is a "recently seen" set, unrelated to publication.

        Args:
            hours: Window length (may be fractional).
            exclude_day: Day whose snapshot is ignored.
            now: Reference time (defaults to now).

        Returns:
            Ids from every snapshot whose ``fetched_at`` is strictly after
            ``now - hours``.
        """
        ids: set[str] = set()
        if not self._data_dir.exists():
            return ids

        now = now or datetime.now(UTC)
        cutoff = now - timedelta(hours=hours)

        for path in sorted(self._data_dir.glob("*.json")):
            if exclude_day and path.stem == exclude_day:
                continue
            pool = self._read_pool(path)
            if pool is None or pool.fetched_at <= cutoff:
                continue
            ids.update(item.id for item in pool.items)

        self._log.debug(
            "recent_ids_collected",
            hours=hours,
            exclude_day=exclude_day,
            count=len(ids),
        )
        return ids

    def _read_pool(self, path: Path) -> DailyPool | None:
        """Read a snapshot, treating unreadable files as absent.

        Args:
            path: Snapshot path.

        Returns:
            Parsed pool, or None when missing or corrupt.
        """
        try:
            data = read_json(path)
        except FileNotFoundError:
            return None
        except SnapshotCorruptError as e:
            self._report_corrupt(path, e.reason)
            return None

        try:
            return DailyPool.model_validate(data)
        except ValidationError as e:
            self._report_corrupt(path, f"{e.error_count()} validation errors")
            return None

    def _report_corrupt(self, path: Path, reason: str) -> None:
        """Log and count a snapshot that is being treated as empty."""
        self._metrics.record_corrupt()
        self._log.warning("snapshot_corrupt", path=str(path), reason=reason)
