"""CLI commands for the daily digest."""

import logging
import sys
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn

import click
import structlog

from src.collectors.runner import CollectorRunner
from src.config.constants import COMPONENT_CLI, DEFAULT_CONFIG_FILE
from src.config.loader import ConfigLoader, ConfigValidationError
from src.config.schemas.app import DigestConfig
from src.extractor.reader import JinaReader
from src.fetch.client import HttpFetcher
from src.llm.errors import LlmAuthError
from src.llm.factory import create_llm_client
from src.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
)
from src.pipeline.errors import PipelineError
from src.pipeline.models import CollectSummary, GenerateMode, GenerateSummary
from src.pipeline.orchestrator import DigestPipeline, parse_generate_mode
from src.store.errors import StoreError
from src.store.models import Source


logger = structlog.get_logger()

SOURCE_LABELS = {Source.HACKERNEWS: "HN", Source.V2EX: "V2EX"}

# Failures reported as "Error: ..." with exit code 1
_USER_ERRORS = (PipelineError, LlmAuthError, StoreError)


@dataclass
class CliOptions:
    """Options shared by every command."""

    config_path: Path
    data_dir: Path
    output_dir: Path
    json_logs: bool
    verbose: bool
    hn_only: bool = False
    v2ex_only: bool = False

    @property
    def enable_hn(self) -> bool:
        """Hacker News runs unless --v2ex-only was given."""
        return not self.v2ex_only

    @property
    def enable_v2ex(self) -> bool:
        """V2EX runs unless --hn-only was given."""
        return not self.hn_only


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _start_run(options: CliOptions, command: str) -> tuple[str, DigestConfig]:
    """Configure logging, bind the run id and load the configuration."""
    if options.hn_only and options.v2ex_only:
        _fail("--hn-only and --v2ex-only are mutually exclusive.")

    run_id = str(uuid.uuid4())
    configure_logging(
        level=logging.DEBUG if options.verbose else logging.INFO,
        json_format=options.json_logs,
    )
    bind_run_context(run_id, command)
    logger.bind(component=COMPONENT_CLI).info(
        "digest_command_started",
        config_path=str(options.config_path),
        data_dir=str(options.data_dir),
        output_dir=str(options.output_dir),
    )

    try:
        config = ConfigLoader(run_id).load(options.config_path)
    except ConfigValidationError as e:
        click.echo(f"Error: invalid configuration in {e.file_path}:", err=True)
        for error in e.errors:
            click.echo(f"  - {error['loc']}: {error['msg']}", err=True)
        sys.exit(1)
    return run_id, config


def build_pipeline(
    config: DigestConfig,
    options: CliOptions,
    run_id: str,
    mode: GenerateMode | None = None,
) -> DigestPipeline:
    """Wire the HTTP client, collectors, extractor and LLM client together.

    The LLM client is only built for AI mode, and only when a key is set;
    the pipeline reports the missing key itself.
    """
    fetcher = HttpFetcher(config.fetch, run_id)
    llm_client = None
    if mode == GenerateMode.AI_DIGEST and config.ai.api_key:
        llm_client = create_llm_client(
            config.ai.provider.value,
            config.ai.api_key,
            config.ai.model,
            config.ai.base_url,
        )
    return DigestPipeline(
        config=config,
        data_dir=options.data_dir,
        output_dir=options.output_dir,
        run_id=run_id,
        runner=CollectorRunner(fetcher, run_id),
        extractor=JinaReader(fetcher, run_id),
        llm_client=llm_client,
        fetcher=fetcher,
    )


def _print_collect(summary: CollectSummary) -> None:
    click.echo(f"collect - {summary.day}")
    for source, fetched in summary.fetched.items():
        label = SOURCE_LABELS[source]
        if source in summary.pool:
            click.echo(
                f"{label}: {fetched} fetched -> {summary.pool[source]} total in pool"
            )
        else:
            click.echo(f"{label}: nothing fetched, pool unchanged")
    for error in summary.errors:
        click.echo(f"  feed failed: {error.source_id} ({error.message})")
    click.echo("Data collected. Run `digest generate` to produce the digest.")


def _print_generate(summary: GenerateSummary) -> None:
    click.echo(f"generate - {summary.day} ({summary.mode.value})")
    for source, pooled in summary.pooled.items():
        label = SOURCE_LABELS[source]
        click.echo(f"{label}: {pooled} pooled -> {summary.ranked[source]} ranked")
    for generated in summary.files:
        click.echo(f"wrote {generated.path}")
    if summary.is_empty:
        click.echo("No items to publish (everything was filtered or nothing was fetched).")


def _run_generate(
    options: CliOptions,
    mode: GenerateMode | str,
    top_n: int | None,
    fetch_first: bool,
) -> None:
    try:
        parsed = parse_generate_mode(mode)
    except PipelineError as e:
        _fail(str(e))

    run_id, config = _start_run(options, f"generate:{parsed.value}")
    try:
        pipeline = build_pipeline(config, options, run_id, parsed)
        summary = pipeline.generate(
            parsed,
            top_n=top_n,
            enable_hn=options.enable_hn,
            enable_v2ex=options.enable_v2ex,
            fetch_first=fetch_first,
        )
    except _USER_ERRORS as e:
        _fail(str(e))
    finally:
        clear_run_context()
    _print_generate(summary)


def common_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options every command accepts."""
    decorators = [
        click.option(
            "--config",
            "config_path",
            type=click.Path(dir_okay=False, path_type=Path),
            default=DEFAULT_CONFIG_FILE,
            show_default=True,
            help="Path to config.yaml (missing file means defaults).",
        ),
        click.option(
            "--data-dir",
            type=click.Path(file_okay=False, path_type=Path),
            default="data",
            show_default=True,
            help="Directory holding daily pools and the publication ledger.",
        ),
        click.option(
            "--out",
            "output_dir",
            type=click.Path(file_okay=False, path_type=Path),
            default="out",
            show_default=True,
            help="Output directory for generated files.",
        ),
        click.option("--hn-only", is_flag=True, help="Only process Hacker News."),
        click.option("--v2ex-only", is_flag=True, help="Only process V2EX."),
        click.option(
            "--json-logs/--no-json-logs",
            default=False,
            help="Use JSON format for logs (default: console).",
        ),
        click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging."),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def generate_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options of the generate commands."""
    func = click.option(
        "--fetch",
        "fetch_first",
        is_flag=True,
        help="Collect fresh items before ranking.",
    )(func)
    return click.option(
        "--top-n",
        "-t",
        type=click.IntRange(min=0),
        default=None,
        help="Override top_n for every source.",
    )(func)


def _options(**kwargs: Any) -> CliOptions:
    return CliOptions(
        config_path=kwargs["config_path"],
        data_dir=kwargs["data_dir"],
        output_dir=kwargs["output_dir"],
        json_logs=kwargs["json_logs"],
        verbose=kwargs["verbose"],
        hn_only=kwargs["hn_only"],
        v2ex_only=kwargs["v2ex_only"],
    )


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """Daily Hacker News and V2EX digest."""


@cli.command()
@common_options
def collect(**kwargs: Any) -> None:
    """Fetch every enabled feed and merge it into today's pools."""
    options = _options(**kwargs)
    run_id, config = _start_run(options, "collect")
    try:
        summary = build_pipeline(config, options, run_id).collect(
            enable_hn=options.enable_hn, enable_v2ex=options.enable_v2ex
        )
    except _USER_ERRORS as e:
        _fail(str(e))
    finally:
        clear_run_context()
    _print_collect(summary)


@cli.command()
@common_options
@generate_options
@click.option(
    "--profile",
    required=True,
    help="Output profile: ai_digest or openclaw.",
)
def generate(
    profile: str, top_n: int | None, fetch_first: bool, **kwargs: Any
) -> None:
    """Rank today's pools and write the digest for a profile."""
    _run_generate(_options(**kwargs), profile, top_n, fetch_first)


@cli.command("generate-ai")
@common_options
@generate_options
def generate_ai(top_n: int | None, fetch_first: bool, **kwargs: Any) -> None:
    """Shortcut for `generate --profile ai_digest`."""
    _run_generate(_options(**kwargs), GenerateMode.AI_DIGEST, top_n, fetch_first)


@cli.command("generate-openclaw")
@common_options
@generate_options
def generate_openclaw(top_n: int | None, fetch_first: bool, **kwargs: Any) -> None:
    """Shortcut for `generate --profile openclaw`."""
    _run_generate(_options(**kwargs), GenerateMode.OPENCLAW, top_n, fetch_first)


if __name__ == "__main__":
    cli()
