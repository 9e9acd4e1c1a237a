"""Structured logging configuration for vibesh.

Uses structlog so that pipeline events (dispatch, classification,
execution) carry key/value context, rendered either for humans on the
console or as JSON lines. Logs go to stderr by default so they never
mix with command output on stdout.

Every event carries the ``component`` that emitted it, and the front
end binds the session's ``front_end`` and current ``mode`` into the
context so lines from one session can be told apart.
"""

import logging
import sys
from typing import TYPE_CHECKING, TextIO

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from vibesh.config import VibeshSettings

QUIET_LIBRARIES = ("httpx", "httpcore", "openai")


def configure_logging(
    settings: "VibeshSettings | None" = None,
    stream: TextIO | None = None,
) -> None:
    """Configure structured logging based on settings.

    Args:
        settings: Application settings. If None, uses defaults.
        stream: Destination for log lines. Defaults to stderr.
    """
    stream = stream or sys.stderr
    log_level = logging.WARNING
    log_format = "console"

    if settings is not None:
        log_level = getattr(logging, settings.log_level.upper(), logging.WARNING)
        log_format = settings.log_format

    structlog.contextvars.clear_contextvars()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(
                colors=stream.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    # The OpenAI client logs through the standard library
    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        handlers=[logging.StreamHandler(stream)],
    )
    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger whose events are tagged with ``component``."""
    return structlog.get_logger(component=component)


def bind_context(**kwargs: object) -> None:
    """Bind context variables to all subsequent log calls in the current context.

    Example:
        bind_context(front_end="script", mode="generative")
        logger.info("line_dispatched")  # includes front_end and mode

    Args:
        **kwargs: Key-value pairs to bind to logging context
    """
    structlog.contextvars.bind_contextvars(**kwargs)


class Loggers:
    """Pre-configured logger instances for vibesh components."""

    @staticmethod
    def cli() -> structlog.stdlib.BoundLogger:
        """Logger for the terminal front-end and router."""
        return get_logger("cli")

    @staticmethod
    def pipeline() -> structlog.stdlib.BoundLogger:
        """Logger for matcher, classifier, gate and executor."""
        return get_logger("pipeline")
