"""Structured logging setup shared by the CLI and the weather client."""

import logging
import sys

import structlog

LEVEL_NAMES = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_level(name: str | None) -> int:
    """Map a config level name to a logging level, defaulting to INFO."""
    if not name:
        return logging.INFO
    return LEVEL_NAMES.get(name.strip().lower(), logging.INFO)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure structlog to write human-readable events to stderr.

    Args:
        level: Minimum level that gets emitted.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


logger = structlog.get_logger()
