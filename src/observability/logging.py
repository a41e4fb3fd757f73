"""structlog setup for digest runs."""

import logging
import sys
from typing import TextIO

import structlog


# Third-party loggers that are chatty at INFO
_QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(
    level: int = logging.INFO,
    output: TextIO | None = None,
    json_format: bool = True,
) -> None:
    """Configure structlog for one process.

    Log lines go to ``output`` (stderr by default) so stdout stays free for
    the progress lines the CLI prints.

    Args:
        level: Minimum level emitted.
        output: Stream receiving log lines.
        json_format: JSON lines when True, coloured console output otherwise.
    """
    output = output or sys.stderr
    renderer: structlog.types.Processor
    if json_format:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=output.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(message)s", stream=output, level=level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def bind_run_context(run_id: str, command: str | None = None) -> None:
    """Attach the run id (and CLI command) to every later log line.

    Args:
        run_id: Unique run identifier.
        command: CLI command name, if any.
    """
    context: dict[str, str] = {"run_id": run_id}
    if command:
        context["command"] = command
    structlog.contextvars.bind_contextvars(**context)


def clear_run_context() -> None:
    """Drop the run context bound by ``bind_run_context``."""
    structlog.contextvars.unbind_contextvars("run_id", "command")
