"""structlog setup for the catalog process. Call once at startup."""

from __future__ import annotations

import logging
import sys

import structlog

from catalog.infrastructure.config import Settings


def configure_logging(settings: Settings) -> None:
    """Route structlog (and stdlib logging) to stderr.

    Console rendering for humans, JSON lines when ``log_format`` is
    ``json``. stdout stays free for command output.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    # SQLAlchemy and aiosqlite log through the standard library.
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
