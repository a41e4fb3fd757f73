"""Unit tests for the digest CLI commands."""

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import structlog
from click.testing import CliRunner

from src.cli.digest import CliOptions, build_pipeline, cli
from src.collectors.errors import CollectorErrorClass, ErrorRecord
from src.config.schemas.app import AiConfig, DigestConfig
from src.pipeline.errors import PreconditionError
from src.pipeline.models import CollectSummary, GenerateMode, GenerateSummary
from src.renderer.models import GeneratedFile
from src.store.models import Source
from tests.helpers.time import FIXED_DAY


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real credentials out of the loaded configuration."""
    for name in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "V2EX_TOKEN"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Undo the logging setup each command performs."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def build() -> Iterator[MagicMock]:
    """Patch pipeline construction."""
    with patch("src.cli.digest.build_pipeline") as mock_build:
        yield mock_build


def run(*args: str) -> tuple[int, str]:
    """Invoke the CLI in an empty directory."""
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(cli, list(args))
    return result.exit_code, result.output


def options(tmp_path: Path) -> CliOptions:
    """Default options rooted at tmp_path."""
    return CliOptions(
        config_path=tmp_path / "config.yaml",
        data_dir=tmp_path / "data",
        output_dir=tmp_path / "out",
        json_logs=False,
        verbose=False,
    )


class TestCliOptions:
    """Tests for CliOptions source switches."""

    def test_default_enables_both(self, tmp_path: Path) -> None:
        """Test that both sources run by default."""
        opts = options(tmp_path)

        assert opts.enable_hn is True
        assert opts.enable_v2ex is True

    def test_hn_only(self, tmp_path: Path) -> None:
        """Test that --hn-only turns V2EX off."""
        opts = options(tmp_path)
        opts.hn_only = True

        assert opts.enable_hn is True
        assert opts.enable_v2ex is False


class TestCollectCommand:
    """Tests for `digest collect`."""

    def test_prints_summary(self, build: MagicMock) -> None:
        """Test per-source counts and failed feeds in the output."""
        build.return_value.collect.return_value = CollectSummary(
            day=FIXED_DAY,
            fetched={Source.HACKERNEWS: 30, Source.V2EX: 0},
            pool={Source.HACKERNEWS: 45},
            errors=[
                ErrorRecord(
                    error_class=CollectorErrorClass.FETCH,
                    message="HTTP 503",
                    source_id="v2ex:hot",
                )
            ],
        )

        code, output = run("collect")

        assert code == 0
        assert f"collect - {FIXED_DAY}" in output
        assert "HN: 30 fetched -> 45 total in pool" in output
        assert "V2EX: nothing fetched, pool unchanged" in output
        assert "feed failed: v2ex:hot (HTTP 503)" in output

    def test_source_switch(self, build: MagicMock) -> None:
        """Test that --v2ex-only disables Hacker News."""
        build.return_value.collect.return_value = CollectSummary(day=FIXED_DAY)

        code, _ = run("collect", "--v2ex-only")

        assert code == 0
        build.return_value.collect.assert_called_once_with(
            enable_hn=False, enable_v2ex=True
        )

    def test_exclusive_switches(self, build: MagicMock) -> None:
        """Test that both only-switches together are rejected."""
        code, output = run("collect", "--hn-only", "--v2ex-only")

        assert code == 1
        assert "mutually exclusive" in output
        build.assert_not_called()

    def test_invalid_config(self, build: MagicMock) -> None:
        """Test that validation errors are listed and exit 1."""
        runner = CliRunner()
        with runner.isolated_filesystem():
            Path("config.yaml").write_text("hackernews:\n  limit: 0\n", encoding="utf-8")
            result = runner.invoke(cli, ["collect"])

        assert result.exit_code == 1
        assert "invalid configuration" in result.output
        assert "  - hackernews.limit:" in result.output
        build.assert_not_called()


class TestGenerateCommands:
    """Tests for `digest generate` and its shortcuts."""

    def test_generate_openclaw(self, build: MagicMock) -> None:
        """Test the profile, options and printed summary."""
        build.return_value.generate.return_value = GenerateSummary(
            day=FIXED_DAY,
            mode=GenerateMode.OPENCLAW,
            pooled={Source.HACKERNEWS: 12},
            ranked={Source.HACKERNEWS: 5},
            files=[
                GeneratedFile(
                    path=f"openclaw/hn-{FIXED_DAY}.json",
                    absolute_path="/tmp/out/openclaw/hn.json",  # noqa: S108
                    bytes_written=10,
                    sha256="0" * 64,
                )
            ],
        )

        code, output = run(
            "generate", "--profile", "openclaw", "--top-n", "5", "--fetch", "--hn-only"
        )

        assert code == 0
        assert "HN: 12 pooled -> 5 ranked" in output
        assert f"wrote openclaw/hn-{FIXED_DAY}.json" in output
        build.return_value.generate.assert_called_once_with(
            GenerateMode.OPENCLAW,
            top_n=5,
            enable_hn=True,
            enable_v2ex=False,
            fetch_first=True,
        )

    def test_generate_ai_shortcut(self, build: MagicMock) -> None:
        """Test that generate-ai builds the pipeline for AI mode."""
        build.return_value.generate.return_value = GenerateSummary(
            day=FIXED_DAY, mode=GenerateMode.AI_DIGEST
        )

        code, output = run("generate-ai")

        assert code == 0
        assert build.call_args.args[3] == GenerateMode.AI_DIGEST
        assert "No items to publish" in output

    def test_unknown_profile(self, build: MagicMock) -> None:
        """Test that an unknown profile exits 1 before any work."""
        code, output = run("generate", "--profile", "pdf")

        assert code == 1
        assert "Error: Invalid profile: pdf" in output
        build.assert_not_called()

    def test_missing_profile(self) -> None:
        """Test that --profile is required."""
        code, _ = run("generate")

        assert code == 2

    def test_negative_top_n(self) -> None:
        """Test that --top-n must not be negative."""
        code, _ = run("generate-openclaw", "--top-n", "-1")

        assert code == 2

    def test_precondition_error(self, build: MagicMock) -> None:
        """Test that pipeline precondition failures exit 1."""
        build.return_value.generate.side_effect = PreconditionError(
            "AI mode requires ai.api_key"
        )

        code, output = run("generate-ai")

        assert code == 1
        assert "Error: AI mode requires ai.api_key" in output


class TestBuildPipeline:
    """Tests for build_pipeline wiring."""

    def test_openclaw_has_no_llm(self, tmp_path: Path) -> None:
        """Test that no LLM client is built outside AI mode."""
        with patch("src.cli.digest.create_llm_client") as create:
            build_pipeline(
                DigestConfig(ai=AiConfig(api_key="sk-test")),  # noqa: S106
                options(tmp_path),
                "run-1",
                GenerateMode.OPENCLAW,
            )

        create.assert_not_called()

    def test_ai_mode_builds_client(self, tmp_path: Path) -> None:
        """Test that AI mode with a key creates the configured client."""
        config = DigestConfig(ai=AiConfig(provider="anthropic", api_key="ak-test"))  # noqa: S106

        with patch("src.cli.digest.create_llm_client") as create:
            build_pipeline(config, options(tmp_path), "run-1", GenerateMode.AI_DIGEST)

        create.assert_called_once_with("anthropic", "ak-test", config.ai.model, "")

    def test_ai_mode_without_key(self, tmp_path: Path) -> None:
        """Test that a missing key leaves the check to the pipeline."""
        with patch("src.cli.digest.create_llm_client") as create:
            pipeline = build_pipeline(
                DigestConfig(), options(tmp_path), "run-1", GenerateMode.AI_DIGEST
            )

        create.assert_not_called()
        assert pipeline.ledger.path == tmp_path / "data" / "published" / "index.json"
