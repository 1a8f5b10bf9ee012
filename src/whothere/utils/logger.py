"""Structured logging for whothere.

Logs go to stderr so that CLI tables and JSON written to stdout stay clean.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.typing import FilteringBoundLogger, Processor


def _stderr_logger(*args) -> structlog.PrintLogger:
    # sys.stderr is looked up per logger, not once at configure time
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(log_level: str = "WARNING", json_output: bool = False) -> None:
    """Configure structlog for the library and the CLI.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, render JSON lines. If False, use the console renderer.
    """
    level = getattr(logging, log_level.upper(), logging.WARNING)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: Optional[str] = None) -> FilteringBoundLogger:
    """Get a logger bound to the given name."""
    return structlog.get_logger(name or "whothere")

