"""Unit tests for the digest pipeline."""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from src.collectors.runner import FetchAllResult
from src.config.schemas.app import (
    AiConfig,
    DigestConfig,
    ExtractorConfig,
    HackerNewsConfig,
    V2exConfig,
)
from src.llm.errors import LlmApiError
from src.pipeline.errors import PreconditionError
from src.pipeline.models import GenerateMode
from src.pipeline.orchestrator import DigestPipeline, parse_generate_mode
from src.store.models import NormalizedItem, Source
from tests.helpers.items import make_item
from tests.helpers.time import FIXED_DAY, FIXED_NOW, hours_before


def fetch_result(
    hn: list[NormalizedItem] | None = None,
    v2ex: list[NormalizedItem] | None = None,
) -> FetchAllResult:
    """FetchAllResult holding the given items."""
    return FetchAllResult(
        items_by_source={Source.HACKERNEWS: hn or [], Source.V2EX: v2ex or []}
    )


def make_config(**overrides: object) -> DigestConfig:
    """Configuration pinned to UTC day keys."""
    fields: dict[str, object] = {
        "timezone": "UTC",
        "hackernews": HackerNewsConfig(top_n=3),
        "v2ex": V2exConfig(top_n=3, exclude_nodes=["deals"]),
    }
    fields.update(overrides)
    return DigestConfig(**fields)  # type: ignore[arg-type]


def make_extractor(text: str = "") -> MagicMock:
    """Extractor whose every extraction returns ``text``."""
    extractor = MagicMock()
    extractor.extract.return_value = text
    return extractor


def make_pipeline(
    tmp_path: Path,
    config: DigestConfig | None = None,
    runner: MagicMock | None = None,
    extractor: MagicMock | None = None,
    llm_client: MagicMock | None = None,
) -> DigestPipeline:
    """Pipeline over tmp_path with mocked collaborators and a fixed clock."""
    return DigestPipeline(
        config or make_config(),
        data_dir=tmp_path / "data",
        output_dir=tmp_path / "out",
        run_id="test-run",
        runner=runner or MagicMock(),
        extractor=extractor or make_extractor(),
        llm_client=llm_client,
        now=FIXED_NOW,
    )


def read_json(path: Path) -> dict:
    """Parse a JSON output file."""
    return json.loads(path.read_text(encoding="utf-8"))


class TestParseGenerateMode:
    """Tests for parse_generate_mode."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("ai_digest", GenerateMode.AI_DIGEST),
            (" OpenClaw ", GenerateMode.OPENCLAW),
            (GenerateMode.OPENCLAW, GenerateMode.OPENCLAW),
        ],
    )
    def test_valid(self, raw: str, expected: GenerateMode) -> None:
        """Test accepted profile names."""
        assert parse_generate_mode(raw) == expected

    def test_invalid(self) -> None:
        """Test that unknown profiles raise PreconditionError."""
        with pytest.raises(PreconditionError, match="Invalid profile: pdf"):
            parse_generate_mode("pdf")


class TestCollect:
    """Tests for DigestPipeline.collect."""

    def test_merges_fetched_items(self, tmp_path: Path) -> None:
        """Test that fetched items land in today's pools."""
        runner = MagicMock()
        runner.fetch_all.return_value = fetch_result(
            hn=[make_item("1"), make_item("2")],
            v2ex=[make_item("9", source=Source.V2EX)],
        )
        pipeline = make_pipeline(tmp_path, runner=runner)

        summary = pipeline.collect()

        assert summary.day == FIXED_DAY
        assert summary.fetched == {Source.HACKERNEWS: 2, Source.V2EX: 1}
        assert summary.pool == {Source.HACKERNEWS: 2, Source.V2EX: 1}
        assert [i.id for i in pipeline.store(Source.HACKERNEWS).load(FIXED_DAY)] == [
            "1",
            "2",
        ]

    def test_accumulates_across_runs(self, tmp_path: Path) -> None:
        """Test that a second collect grows the pool."""
        runner = MagicMock()
        runner.fetch_all.side_effect = [
            fetch_result(hn=[make_item("1")]),
            fetch_result(hn=[make_item("1", engagement=50), make_item("2")]),
        ]
        pipeline = make_pipeline(tmp_path, runner=runner)

        pipeline.collect()
        summary = pipeline.collect()

        pool = pipeline.store(Source.HACKERNEWS).load(FIXED_DAY)
        assert summary.pool[Source.HACKERNEWS] == 2
        assert {item.id: item.points for item in pool} == {"1": 50, "2": 10}

    def test_empty_source_not_written(self, tmp_path: Path) -> None:
        """Test that a source that fetched nothing keeps no snapshot."""
        runner = MagicMock()
        runner.fetch_all.return_value = fetch_result(hn=[make_item("1")])
        pipeline = make_pipeline(tmp_path, runner=runner)

        summary = pipeline.collect()

        assert Source.V2EX not in summary.pool
        assert not pipeline.store(Source.V2EX).snapshot_path(FIXED_DAY).exists()

    def test_passes_switches(self, tmp_path: Path) -> None:
        """Test that caller switches reach the runner."""
        runner = MagicMock()
        runner.fetch_all.return_value = fetch_result()
        config = make_config()
        pipeline = make_pipeline(tmp_path, config=config, runner=runner)

        summary = pipeline.collect(enable_hn=False)

        runner.fetch_all.assert_called_once_with(config, False, True)
        assert summary.fetched == {Source.V2EX: 0}

    def test_fetch_failure_propagates(self, tmp_path: Path) -> None:
        """Test that an unexpected runner error is raised."""
        runner = MagicMock()
        runner.fetch_all.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            make_pipeline(tmp_path, runner=runner).collect()


class TestGenerateOpenclaw:
    """Tests for the openclaw profile."""

    def test_writes_json_per_source(self, tmp_path: Path) -> None:
        """Test ranked output, empty sources and ledger marks."""
        pipeline = make_pipeline(tmp_path, extractor=make_extractor("article body"))
        pipeline.store(Source.HACKERNEWS).merge(
            FIXED_DAY,
            [make_item("a", engagement=5), make_item("b", engagement=50)],
            now=FIXED_NOW,
        )

        summary = pipeline.generate("openclaw")

        hn = read_json(tmp_path / "out" / "openclaw" / f"hn-{FIXED_DAY}.json")
        v2ex = read_json(tmp_path / "out" / "openclaw" / f"v2ex-{FIXED_DAY}.json")
        assert [entry["id"] for entry in hn["items"]] == ["b", "a"]
        assert hn["items"][0]["content"] == "article body"
        assert v2ex["items"] == []
        assert summary.ranked == {Source.HACKERNEWS: 2, Source.V2EX: 0}
        assert summary.published == {Source.HACKERNEWS: 2, Source.V2EX: 0}
        assert len(summary.files) == 2
        assert pipeline.ledger.get_recent_ids(72, Source.HACKERNEWS, now=FIXED_NOW) == {
            "a",
            "b",
        }

    def test_extraction_unbounded(self, tmp_path: Path) -> None:
        """Test that openclaw keeps the full extracted text."""
        extractor = make_extractor("z" * 20_000)
        pipeline = make_pipeline(tmp_path, extractor=extractor)
        pipeline.store(Source.HACKERNEWS).merge(FIXED_DAY, [make_item("a")], now=FIXED_NOW)

        pipeline.generate(GenerateMode.OPENCLAW, enable_v2ex=False)

        hn = read_json(tmp_path / "out" / "openclaw" / f"hn-{FIXED_DAY}.json")
        assert len(hn["items"][0]["content"]) == 20_000
        assert hn["items"][0]["contentTruncated"] is False
        assert extractor.extract.call_args.args[1] is None

    def test_regenerate_same_day_is_stable(self, tmp_path: Path) -> None:
        """Test that today's own ledger marks do not hide today's items."""
        pipeline = make_pipeline(tmp_path)
        pipeline.store(Source.HACKERNEWS).merge(FIXED_DAY, [make_item("a")], now=FIXED_NOW)

        first = pipeline.generate("openclaw")
        second = pipeline.generate("openclaw")

        assert first.ranked[Source.HACKERNEWS] == 1
        assert second.ranked[Source.HACKERNEWS] == 1

    def test_skips_recently_published(self, tmp_path: Path) -> None:
        """Test that ids published on an earlier day are skipped."""
        pipeline = make_pipeline(tmp_path)
        pipeline.store(Source.HACKERNEWS).merge(
            FIXED_DAY, [make_item("old"), make_item("new")], now=FIXED_NOW
        )
        pipeline.ledger.mark_published(
            "2026-02-28", Source.HACKERNEWS, ["old"], now=hours_before(20)
        )

        pipeline.generate("openclaw", enable_v2ex=False)

        hn = read_json(tmp_path / "out" / "openclaw" / f"hn-{FIXED_DAY}.json")
        assert [entry["id"] for entry in hn["items"]] == ["new"]

    def test_expired_ledger_entries_do_not_skip(self, tmp_path: Path) -> None:
        """Test that entries older than skip_hours are ignored."""
        pipeline = make_pipeline(tmp_path, config=make_config(skip_hours=12))
        pipeline.store(Source.HACKERNEWS).merge(FIXED_DAY, [make_item("old")], now=FIXED_NOW)
        pipeline.ledger.mark_published(
            "2026-02-28", Source.HACKERNEWS, ["old"], now=hours_before(20)
        )

        summary = pipeline.generate("openclaw", enable_v2ex=False)

        assert summary.ranked[Source.HACKERNEWS] == 1

    def test_seen_skip(self, tmp_path: Path) -> None:
        """Test that items pooled on an earlier day are skipped when enabled."""
        pipeline = make_pipeline(tmp_path, config=make_config(seen_skip_hours=48))
        store = pipeline.store(Source.HACKERNEWS)
        store.merge("2026-02-28", [make_item("seen")], now=hours_before(12))
        store.merge(FIXED_DAY, [make_item("seen"), make_item("fresh")], now=FIXED_NOW)

        pipeline.generate("openclaw", enable_v2ex=False)

        hn = read_json(tmp_path / "out" / "openclaw" / f"hn-{FIXED_DAY}.json")
        assert [entry["id"] for entry in hn["items"]] == ["fresh"]

    def test_excludes_v2ex_nodes(self, tmp_path: Path) -> None:
        """Test that excluded nodes never reach the output."""
        pipeline = make_pipeline(tmp_path)
        pipeline.store(Source.V2EX).merge(
            FIXED_DAY,
            [
                make_item("1", source=Source.V2EX, category="Deals"),
                make_item("2", source=Source.V2EX),
            ],
            now=FIXED_NOW,
        )

        pipeline.generate("openclaw", enable_hn=False)

        v2ex = read_json(tmp_path / "out" / "openclaw" / f"v2ex-{FIXED_DAY}.json")
        assert [entry["id"] for entry in v2ex["items"]] == ["2"]

    def test_top_n_override(self, tmp_path: Path) -> None:
        """Test that top_n replaces the configured value."""
        pipeline = make_pipeline(tmp_path)
        pipeline.store(Source.HACKERNEWS).merge(
            FIXED_DAY,
            [make_item(str(i), engagement=10 + i) for i in range(5)],
            now=FIXED_NOW,
        )

        summary = pipeline.generate("openclaw", top_n=1, enable_v2ex=False)

        assert summary.ranked[Source.HACKERNEWS] == 1
        assert summary.pooled[Source.HACKERNEWS] == 5

    def test_fetch_first_includes_fresh_items(self, tmp_path: Path) -> None:
        """Test that --fetch merges before loading."""
        runner = MagicMock()
        runner.fetch_all.return_value = fetch_result(hn=[make_item("f")])
        pipeline = make_pipeline(tmp_path, runner=runner)

        summary = pipeline.generate("openclaw", fetch_first=True, enable_v2ex=False)

        assert summary.ranked[Source.HACKERNEWS] == 1
        assert pipeline.store(Source.HACKERNEWS).snapshot_path(FIXED_DAY).exists()

    def test_disabled_source_in_config(self, tmp_path: Path) -> None:
        """Test that a source disabled in config writes nothing."""
        config = make_config(v2ex=V2exConfig(enabled=False))
        pipeline = make_pipeline(tmp_path, config=config)

        pipeline.generate("openclaw")

        assert not (tmp_path / "out" / "openclaw" / f"v2ex-{FIXED_DAY}.json").exists()
        assert (tmp_path / "out" / "openclaw" / f"hn-{FIXED_DAY}.json").exists()


class TestGenerateAiDigest:
    """Tests for the ai_digest profile."""

    def ai_config(self) -> DigestConfig:
        """Configuration with an API key."""
        return make_config(ai=AiConfig(api_key="sk-test"))  # noqa: S106

    def test_requires_key(self, tmp_path: Path) -> None:
        """Test that AI mode without a key fails before any work."""
        runner = MagicMock()
        pipeline = make_pipeline(tmp_path, runner=runner, llm_client=MagicMock())

        with pytest.raises(PreconditionError, match="ai.api_key"):
            pipeline.generate("ai_digest", fetch_first=True)

        runner.fetch_all.assert_not_called()

    def test_requires_client(self, tmp_path: Path) -> None:
        """Test that AI mode without a client is rejected."""
        pipeline = make_pipeline(tmp_path, config=self.ai_config())

        with pytest.raises(PreconditionError, match="summarisation client"):
            pipeline.generate("ai_digest")

    def test_requires_extractor(self, tmp_path: Path) -> None:
        """Test that a disabled extractor is rejected in every mode."""
        config = make_config(extractor=ExtractorConfig(enabled=False))

        with pytest.raises(PreconditionError, match="extractor.enabled"):
            make_pipeline(tmp_path, config=config).generate("openclaw")

    def test_writes_both_profiles(self, tmp_path: Path) -> None:
        """Test llm_context and human_digest files with AI summaries."""
        llm = MagicMock()
        llm.generate_content.return_value = "AI says hi"
        pipeline = make_pipeline(
            tmp_path,
            config=self.ai_config(),
            extractor=make_extractor("Full article text."),
            llm_client=llm,
        )
        pipeline.store(Source.HACKERNEWS).merge(FIXED_DAY, [make_item("a")], now=FIXED_NOW)

        summary = pipeline.generate("ai_digest")

        human = (tmp_path / "out" / "human_digest" / f"hn-{FIXED_DAY}.md").read_text(
            encoding="utf-8"
        )
        context = (tmp_path / "out" / "llm_context" / f"hn-{FIXED_DAY}.md").read_text(
            encoding="utf-8"
        )
        assert "Hacker News 日报 2026-03-01" in human
        assert "AI says hi" in human
        assert "Full article text." not in human
        assert "**Context:**\n\nFull article text." in context
        assert len(summary.files) == 2
        assert summary.published == {Source.HACKERNEWS: 1}

    def test_empty_source_skipped(self, tmp_path: Path) -> None:
        """Test that sources without ranked items produce no files."""
        pipeline = make_pipeline(
            tmp_path, config=self.ai_config(), llm_client=MagicMock()
        )

        summary = pipeline.generate("ai_digest")

        assert summary.files == []
        assert summary.is_empty is True
        assert not (tmp_path / "out" / "human_digest").exists()

    def test_snippet_fallback_when_ai_fails(self, tmp_path: Path) -> None:
        """Test that a failed summary falls back to the snippet."""
        llm = MagicMock()
        llm.generate_content.side_effect = LlmApiError("down")
        pipeline = make_pipeline(
            tmp_path,
            config=self.ai_config(),
            extractor=make_extractor("Snippet source sentence."),
            llm_client=llm,
        )
        pipeline.store(Source.HACKERNEWS).merge(FIXED_DAY, [make_item("a")], now=FIXED_NOW)

        pipeline.generate("ai_digest", enable_v2ex=False)

        human = (tmp_path / "out" / "human_digest" / f"hn-{FIXED_DAY}.md").read_text(
            encoding="utf-8"
        )
        assert "Snippet source sentence." in human
        assert "summary:" not in human
