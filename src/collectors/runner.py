"""Collector runner with per-feed failure isolation."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from src.collectors.errors import CollectorError, CollectorErrorClass, ErrorRecord
from src.collectors.hackernews import HackerNewsCollector
from src.collectors.metrics import CollectorMetrics
from src.collectors.v2ex import V2exCollector
from src.config.schemas.app import DigestConfig
from src.fetch.client import HttpFetcher
from src.store.models import NormalizedItem, Source


logger = structlog.get_logger()


@dataclass
class FetchAllResult:
    """Items gathered from every enabled feed in one run."""

    items_by_source: dict[Source, list[NormalizedItem]] = field(
        default_factory=lambda: {source: [] for source in Source}
    )
    errors: list[ErrorRecord] = field(default_factory=list)
    feeds_succeeded: int = 0

    @property
    def hn_items(self) -> list[NormalizedItem]:
        """Hacker News items across all lists."""
        return self.items_by_source[Source.HACKERNEWS]

    @property
    def v2ex_items(self) -> list[NormalizedItem]:
        """V2EX items across all nodes."""
        return self.items_by_source[Source.V2EX]

    @property
    def feeds_failed(self) -> int:
        """Number of feeds that failed as a whole."""
        return len(self.errors)


class CollectorRunner:
    """Runs every configured list and node, one feed at a time.

    A failing feed is logged, recorded and skipped; the others still run.
    """

    def __init__(
        self,
        http_client: HttpFetcher,
        run_id: str,
        hn_collector: HackerNewsCollector | None = None,
        v2ex_collector: V2exCollector | None = None,
    ) -> None:
        """Initialize the collector runner.

        Args:
            http_client: HTTP client for fetching.
            run_id: Unique run identifier.
            hn_collector: Optional Hacker News collector override.
            v2ex_collector: Optional V2EX collector override.
        """
        self._run_id = run_id
        self._hn = hn_collector or HackerNewsCollector(http_client, run_id)
        self._v2ex = v2ex_collector or V2exCollector(http_client, run_id)
        self._metrics = CollectorMetrics.get_instance()
        self._log = logger.bind(component="runner", run_id=run_id)

    def fetch_all(
        self,
        config: DigestConfig,
        enable_hn: bool = True,
        enable_v2ex: bool = True,
    ) -> FetchAllResult:
        """Collect every enabled feed.

        Args:
            config: Application configuration.
            enable_hn: Caller-level switch for Hacker News.
            enable_v2ex: Caller-level switch for V2EX.

        Returns:
            FetchAllResult with per-source items and feed errors.
        """
        result = FetchAllResult()

        if config.hackernews.enabled and enable_hn:
            for list_name in config.hackernews.lists:
                self._run_feed(
                    result,
                    Source.HACKERNEWS,
                    list_name,
                    lambda name=list_name: self._hn.collect(
                        name, config.hackernews.limit
                    ),
                )

        if config.v2ex.enabled and enable_v2ex:
            for node in config.v2ex.nodes:
                self._run_feed(
                    result,
                    Source.V2EX,
                    node,
                    lambda name=node: self._v2ex.collect(
                        name, config.v2ex.token, config.v2ex.pages
                    ),
                )

        self._log.info(
            "fetch_all_complete",
            hn_items=len(result.hn_items),
            v2ex_items=len(result.v2ex_items),
            feeds_succeeded=result.feeds_succeeded,
            feeds_failed=result.feeds_failed,
        )
        return result

    def _run_feed(
        self,
        result: FetchAllResult,
        source: Source,
        name: str,
        collect: Callable[[], list[NormalizedItem]],
    ) -> None:
        feed = f"{source.value}:{name}"
        start = time.perf_counter()
        try:
            items = collect()
        except CollectorError as e:
            self._record_failure(result, feed, ErrorRecord.from_exception(e))
            return
        except Exception as e:  # noqa: BLE001
            self._record_failure(
                result,
                feed,
                ErrorRecord(
                    error_class=CollectorErrorClass.FETCH,
                    message=f"Execution error: {e}",
                    source_id=feed,
                ),
            )
            return
        finally:
            self._metrics.record_duration(feed, (time.perf_counter() - start) * 1000)

        result.items_by_source[source].extend(items)
        result.feeds_succeeded += 1
        self._metrics.record_items(feed, len(items))
        self._log.info("feed_collected", feed=feed, items=len(items))

    def _record_failure(
        self, result: FetchAllResult, feed: str, record: ErrorRecord
    ) -> None:
        result.errors.append(record)
        self._metrics.record_failure(feed, record.error_class)
        self._log.warning(
            "feed_failed",
            feed=feed,
            error_class=record.error_class.value,
            error=record.message,
        )
