"""Publication ledger: which ids were already emitted, per source."""

import uuid
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import structlog
from pydantic import ValidationError

from src.store.days import validate_day_key
from src.store.errors import SnapshotCorruptError
from src.store.io import read_json, write_json_atomic
from src.store.metrics import StoreMetrics
from src.store.models import PublicationEntry, PublicationIndex, Source


logger = structlog.get_logger()


class PublicationLedger:
    """Cross-day record of published item ids.

    Kept separate from the daily pools: an item may be re-fetched many
    times without being published, and an item fetched just before
    midnight must stay suppressed after the day rolls over. The whole
    file is loaded for every query and rewritten for every mark.
    """

    def __init__(self, path: Path | str, run_id: str | None = None) -> None:
        """Initialize the ledger.

        Args:
            path: Ledger file path (e.g. ``data/published/index.json``).
            run_id: Optional run ID for logging context.
        """
        self._path = Path(path)
        self._run_id = run_id or str(uuid.uuid4())
        self._metrics = StoreMetrics.get_instance()
        self._log = logger.bind(component="ledger", run_id=self._run_id)

    @property
    def path(self) -> Path:
        """Get the ledger file path."""
        return self._path

    def get_recent_ids(
        self,
        hours: float,
        source: Source,
        exclude_day: str | None = None,
        now: datetime | None = None,
    ) -> set[str]:
        """Ids published for a source within the trailing window.

        Args:
            hours: Suppression window length (may be fractional).
            source: Source to query.
            exclude_day: Entries marked by a run on this day are ignored,
                so regenerating a day's digest yields the same items.
            now: Reference time (defaults to now).

        Returns:
            Ids whose ``published_at`` is strictly after ``now - hours``.
        """
        now = now or datetime.now(UTC)
        cutoff = now - timedelta(hours=hours)
        entries = self._read_index().sources.get(source.value, {})

        ids = {
            item_id
            for item_id, entry in entries.items()
            if entry.published_at > cutoff
            and not (exclude_day and entry.date == exclude_day)
        }

        self._log.debug(
            "published_ids_collected",
            source=source.value,
            hours=hours,
            exclude_day=exclude_day,
            count=len(ids),
        )
        return ids

    def mark_published(
        self,
        day: str,
        source: Source,
        ids: Iterable[str],
        now: datetime | None = None,
    ) -> int:
        """Record ids as published now.

        Marking an id again refreshes its timestamp and day.

        Args:
            day: Day key of the publishing run.
            source: Source the ids belong to.
            ids: Item ids that were emitted.
            now: Emission time (defaults to now).

        Returns:
            Number of ids marked.

        Raises:
            InvalidDayError: If the day key is malformed.
        """
        validate_day_key(day)
        id_list = list(dict.fromkeys(ids))
        if not id_list:
            return 0

        now = now or datetime.now(UTC)
        index = self._read_index()
        sources = {key: dict(value) for key, value in index.sources.items()}
        entries = sources.setdefault(source.value, {})

        entry = PublicationEntry(published_at=now, date=day)
        for item_id in id_list:
            entries[item_id] = entry

        updated = PublicationIndex(version=index.version, sources=sources)
        write_json_atomic(self._path, updated.model_dump(mode="json", by_alias=True))
        self._metrics.record_ledger_marks(len(id_list))

        self._log.info(
            "ids_marked_published",
            source=source.value,
            day=day,
            count=len(id_list),
            ledger_size=len(entries),
        )
        return len(id_list)

    def _read_index(self) -> PublicationIndex:
        """Read the ledger, treating unreadable files as empty."""
        try:
            data = read_json(self._path)
        except FileNotFoundError:
            return PublicationIndex()
        except SnapshotCorruptError as e:
            self._report_corrupt(e.reason)
            return PublicationIndex()

        try:
            return PublicationIndex.model_validate(data)
        except ValidationError as e:
            self._report_corrupt(f"{e.error_count()} validation errors")
            return PublicationIndex()

    def _report_corrupt(self, reason: str) -> None:
        """Log and count a ledger that is being treated as empty."""
        self._metrics.record_corrupt()
        self._log.warning("ledger_corrupt", path=str(self._path), reason=reason)
