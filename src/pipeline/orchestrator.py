"""Digest pipeline: fetch, merge, load, rank, enrich, publish."""

import dataclasses
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

import structlog

from src.collectors.constants import ENRICH_DEFAULT_MAX_LENGTH
from src.collectors.enricher import enrich_v2ex_items
from src.collectors.runner import CollectorRunner, FetchAllResult
from src.config.schemas.app import DigestConfig
from src.extractor.batch import extract_batch
from src.extractor.reader import JinaReader
from src.fetch.client import HttpFetcher
from src.llm.protocols import LlmClient
from src.llm.summarizer import Summarizer
from src.pipeline.errors import PreconditionError
from src.pipeline.models import CollectSummary, GenerateMode, GenerateSummary
from src.pipeline.state_machine import PipelineStateMachine
from src.ranker.models import ScoredItem
from src.ranker.ranker import ItemRanker
from src.renderer.io import AtomicWriter
from src.renderer.markdown import render_markdown
from src.renderer.models import GeneratedFile, RenderData, RenderItem, RenderProfile
from src.renderer.openclaw import render_openclaw_json
from src.renderer.snippet import generate_snippet
from src.store.days import day_key_for
from src.store.ledger import PublicationLedger
from src.store.models import NormalizedItem, Source
from src.store.pool_store import AccumulationStore


logger = structlog.get_logger()

# Short names used in output file names and OpenClaw documents
OUTPUT_NAMES = {Source.HACKERNEWS: "hn", Source.V2EX: "v2ex"}

DIGEST_TITLES = {
    Source.HACKERNEWS: "Hacker News 日报 {date}",
    Source.V2EX: "V2EX 日报 {date}",
}

LEDGER_PATH = Path("published") / "index.json"


def parse_generate_mode(raw: str | GenerateMode) -> GenerateMode:
    """Parse a generate profile name.

    Raises:
        PreconditionError: If the name is not a known profile.
    """
    if isinstance(raw, GenerateMode):
        return raw
    try:
        return GenerateMode(raw.strip().lower())
    except ValueError as e:
        allowed = ", ".join(mode.value for mode in GenerateMode)
        msg = f"Invalid profile: {raw}. Use one of: {allowed}"
        raise PreconditionError(msg) from e


class DigestPipeline:
    """Runs collect and generate for one data directory.

    Owns one AccumulationStore per source under ``data_dir/<source>`` and
    the publication ledger at ``data_dir/published/index.json``. Phases run
    in strict order; all store and ledger writes happen here, after the
    parallel fetch phases have joined.
    """

    def __init__(  # noqa: PLR0913
        self,
        config: DigestConfig,
        data_dir: Path,
        output_dir: Path,
        run_id: str,
        runner: CollectorRunner,
        extractor: JinaReader,
        llm_client: LlmClient | None = None,
        fetcher: HttpFetcher | None = None,
        now: datetime | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Application configuration.
            data_dir: Root of the persisted pools and ledger.
            output_dir: Root of generated files.
            run_id: Unique run identifier.
            runner: Collector runner used for fetching.
            extractor: Full-text extraction backend.
            llm_client: Summarisation client (required for ai_digest).
            fetcher: HTTP client for V2EX supplements. Defaults to the
                extractor's client.
            now: Fixed reference time. Defaults to the time of each call.
        """
        self._config = config
        self._data_dir = Path(data_dir)
        self._output_dir = Path(output_dir)
        self._run_id = run_id
        self._runner = runner
        self._extractor = extractor
        self._fetcher = fetcher or extractor.http_client
        self._summarizer = (
            Summarizer(llm_client, config.ai.language, run_id) if llm_client else None
        )
        self._now = now
        self._stores = {
            source: AccumulationStore(self._data_dir / source.value, source, run_id)
            for source in Source
        }
        self._ledger = PublicationLedger(self._data_dir / LEDGER_PATH, run_id)
        self._writer = AtomicWriter(self._output_dir, run_id)
        self._log = logger.bind(component="pipeline", run_id=run_id)

    @property
    def ledger(self) -> PublicationLedger:
        """Get the publication ledger."""
        return self._ledger

    def store(self, source: Source) -> AccumulationStore:
        """Get the accumulation store of a source."""
        return self._stores[source]

    def collect(self, enable_hn: bool = True, enable_v2ex: bool = True) -> CollectSummary:
        """Fetch every enabled feed and merge the results into today's pools.

        Args:
            enable_hn: Caller-level switch for Hacker News.
            enable_v2ex: Caller-level switch for V2EX.

        Returns:
            CollectSummary with fetched and pool counts.
        """
        machine = PipelineStateMachine(self._run_id)
        now = self._current_time()
        day = day_key_for(now, self._config.timezone)
        self._log.info("collect_started", day=day)

        try:
            fetched = self._runner.fetch_all(self._config, enable_hn, enable_v2ex)
            machine.to_fetched()
            pool_sizes = self._merge(day, fetched, now)
            machine.to_merged()
        except Exception:
            machine.to_failed()
            raise

        summary = CollectSummary(
            day=day,
            fetched={
                source: len(fetched.items_by_source[source])
                for source in self._enabled_sources(enable_hn, enable_v2ex)
            },
            pool=pool_sizes,
            errors=list(fetched.errors),
        )
        self._log.info(
            "collect_complete",
            day=day,
            fetched={s.value: n for s, n in summary.fetched.items()},
            pool={s.value: n for s, n in summary.pool.items()},
            feeds_failed=fetched.feeds_failed,
        )
        return summary

    def generate(
        self,
        mode: GenerateMode | str,
        top_n: int | None = None,
        enable_hn: bool = True,
        enable_v2ex: bool = True,
        fetch_first: bool = False,
    ) -> GenerateSummary:
        """Rank today's pools and publish the result.

        Args:
            mode: ``ai_digest`` or ``openclaw``.
            top_n: Override for every source's configured top_n.
            enable_hn: Caller-level switch for Hacker News.
            enable_v2ex: Caller-level switch for V2EX.
            fetch_first: Run a collect (fetch + merge) before loading.

        Returns:
            GenerateSummary with counts and written files.

        Raises:
            PreconditionError: If the mode is unknown, AI mode lacks a key or
                client, or the extractor is disabled.
        """
        mode = parse_generate_mode(mode)
        self._check_preconditions(mode)

        machine = PipelineStateMachine(self._run_id)
        now = self._current_time()
        day = day_key_for(now, self._config.timezone)
        sources = self._enabled_sources(enable_hn, enable_v2ex)
        summary = GenerateSummary(day=day, mode=mode)
        self._log.info(
            "generate_started",
            day=day,
            mode=mode.value,
            sources=[s.value for s in sources],
            fetch_first=fetch_first,
        )

        try:
            fresh: dict[Source, list[NormalizedItem]] = {}
            if fetch_first:
                fetched = self._runner.fetch_all(self._config, enable_hn, enable_v2ex)
                machine.to_fetched()
                self._merge(day, fetched, now)
                fresh = fetched.items_by_source
                machine.to_merged()

            pools = {
                source: self._stores[source].load_all(day, fresh.get(source, ()))
                for source in sources
            }
            machine.to_loaded()

            ranker = ItemRanker(self._run_id, now=now)
            ranked: dict[Source, list[ScoredItem]] = {}
            for source in sources:
                result = ranker.rank(
                    source.value,
                    pools[source],
                    top_n if top_n is not None else self._top_n(source),
                    skip_ids=self._skip_ids(source, day, now),
                    exclude_categories=self._exclude_categories(source),
                )
                ranked[source] = result.ranked
                summary.pooled[source] = len(pools[source])
                summary.ranked[source] = result.items_out
            machine.to_ranked()

            ranked = self._enrich(mode, ranked)
            machine.to_enriched()

            if mode == GenerateMode.OPENCLAW:
                self._publish_openclaw(day, ranked, now, summary)
            else:
                self._publish_ai_digest(day, ranked, now, summary)
            machine.to_published()
        except Exception:
            machine.to_failed()
            self._log.warning("generate_failed", day=day, state=machine.state.value)
            raise

        self._log.info(
            "generate_complete",
            day=day,
            mode=mode.value,
            ranked={s.value: n for s, n in summary.ranked.items()},
            files=len(summary.files),
        )
        return summary

    def _check_preconditions(self, mode: GenerateMode) -> None:
        if mode == GenerateMode.AI_DIGEST:
            if not self._config.ai.api_key:
                msg = (
                    "AI mode requires ai.api_key "
                    "(or OPENAI_API_KEY / ANTHROPIC_API_KEY)."
                )
                raise PreconditionError(msg)
            if self._summarizer is None:
                msg = "AI mode requires a summarisation client."
                raise PreconditionError(msg)
        if not self._config.extractor.enabled:
            msg = "extractor.enabled must be true in generate mode."
            raise PreconditionError(msg)

    def _current_time(self) -> datetime:
        return self._now or datetime.now(UTC)

    def _enabled_sources(self, enable_hn: bool, enable_v2ex: bool) -> list[Source]:
        sources = []
        if enable_hn and self._config.hackernews.enabled:
            sources.append(Source.HACKERNEWS)
        if enable_v2ex and self._config.v2ex.enabled:
            sources.append(Source.V2EX)
        return sources

    def _top_n(self, source: Source) -> int:
        if source == Source.HACKERNEWS:
            return self._config.hackernews.top_n
        return self._config.v2ex.top_n

    def _exclude_categories(self, source: Source) -> list[str]:
        if source == Source.V2EX:
            return list(self._config.v2ex.exclude_nodes)
        return []

    def _merge(
        self, day: str, fetched: FetchAllResult, now: datetime
    ) -> dict[Source, int]:
        """Merge fetched items; sources that fetched nothing are not touched."""
        pool_sizes: dict[Source, int] = {}
        for source, items in fetched.items_by_source.items():
            if not items:
                continue
            result = self._stores[source].merge(day, items, now=now)
            pool_sizes[source] = result.pool_size
        return pool_sizes

    def _skip_ids(self, source: Source, day: str, now: datetime) -> set[str]:
        """Published ids in the ledger window, plus recently seen ids if enabled."""
        skip = self._ledger.get_recent_ids(
            self._config.skip_hours, source, exclude_day=day, now=now
        )
        if self._config.seen_skip_hours > 0:
            skip |= self._stores[source].get_recent_ids(
                self._config.seen_skip_hours, exclude_day=day, now=now
            )
        return skip

    def _enrich(
        self, mode: GenerateMode, ranked: dict[Source, list[ScoredItem]]
    ) -> dict[Source, list[ScoredItem]]:
        """Add V2EX supplements and article text to the ranked items."""
        extractor_config = self._config.extractor
        if mode == GenerateMode.OPENCLAW:
            enrich_limit: int | None = None
            extract_limit: int | None = None
        else:
            enrich_limit = ENRICH_DEFAULT_MAX_LENGTH
            extract_limit = extractor_config.max_length

        enriched: dict[Source, list[ScoredItem]] = {}
        for source, scored in ranked.items():
            if not scored:
                enriched[source] = []
                continue
            items = [entry.item for entry in scored]
            if source == Source.V2EX:
                items = enrich_v2ex_items(
                    items,
                    self._fetcher,
                    self._config.v2ex.token,
                    concurrency=extractor_config.concurrency,
                    max_length=enrich_limit,
                    timeout=extractor_config.timeout,
                    reader=self._extractor,
                )
            items = extract_batch(
                items, self._extractor, extractor_config, max_length=extract_limit
            )
            enriched[source] = [
                dataclasses.replace(entry, item=item)
                for entry, item in zip(scored, items, strict=True)
            ]
        return enriched

    def _publish_openclaw(
        self,
        day: str,
        ranked: dict[Source, list[ScoredItem]],
        now: datetime,
        summary: GenerateSummary,
    ) -> None:
        """Write one JSON document per enabled source, even when empty."""
        for source, scored in ranked.items():
            name = OUTPUT_NAMES[source]
            content = render_openclaw_json(name, day, scored, now)
            path = self._output_dir / "openclaw" / f"{name}-{day}.json"
            summary.files.append(self._writer.write(path, content))
            summary.published[source] = self._mark(day, source, scored, now)

    def _publish_ai_digest(
        self,
        day: str,
        ranked: dict[Source, list[ScoredItem]],
        now: datetime,
        summary: GenerateSummary,
    ) -> None:
        """Write llm_context and human_digest markdown for non-empty sources."""
        for source, scored in ranked.items():
            if not scored:
                self._log.info("source_empty", source=source.value, day=day)
                continue
            items, overall = self._summarize(scored)
            name = OUTPUT_NAMES[source]
            title = DIGEST_TITLES[source].format(date=day)
            for profile in (RenderProfile.LLM_CONTEXT, RenderProfile.HUMAN_DIGEST):
                markdown = render_markdown(
                    RenderData(
                        title=title,
                        date=day,
                        summary=overall,
                        items=items,
                        profile=profile,
                    )
                )
                path = self._output_dir / profile.value / f"{name}-{day}.md"
                summary.files.append(self._writer.write(path, markdown))
            summary.published[source] = self._mark(day, source, scored, now)

    def _summarize(
        self, scored: Sequence[ScoredItem]
    ) -> tuple[list[RenderItem], str]:
        """Build render items with snippet digests, upgraded by AI where possible."""
        items = []
        for entry in scored:
            context = entry.item.content.strip()
            items.append(
                RenderItem(
                    item=entry.item,
                    score=entry.score,
                    digest=generate_snippet(context or entry.item.title),
                    context=context,
                )
            )

        if self._summarizer is None:
            return items, ""

        summarized = []
        for render_item in items:
            digest = self._summarizer.summarize_item(
                render_item.item.title, render_item.context or render_item.item.title
            )
            if digest:
                render_item = dataclasses.replace(render_item, digest=digest)
            else:
                self._log.debug("digest_fallback_snippet", item_id=render_item.item.id)
            summarized.append(render_item)

        overall = self._summarizer.summarize_all([entry.item for entry in scored])
        return summarized, overall

    def _mark(
        self,
        day: str,
        source: Source,
        scored: Sequence[ScoredItem],
        now: datetime,
    ) -> int:
        return self._ledger.mark_published(
            day, source, [entry.item.id for entry in scored], now=now
        )
