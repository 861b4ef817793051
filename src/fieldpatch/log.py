"""Structured logging for fieldpatch, rendered as JSON lines on stderr."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


def setup_logging(level: str = "warning") -> None:
    """Configure structlog to emit events at *level* and above.

    Raises ``ValueError`` for a level name outside ``LOG_LEVELS``.
    """
    try:
        log_level = LOG_LEVELS[level.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown log level {level!r}. Available: {', '.join(LOG_LEVELS)}"
        ) from None

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            structlog.processors.JSONRenderer(sort_keys=True, default=str),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str, **context: Any) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name and optional context.

    The tracker binds the lookup key of the document it edits, so every
    field event can be traced back to one stored record.
    """
    return structlog.get_logger(component=component, **context)  # type: ignore[return-value]
