"""
Logging configuration for the usl package.

Log records are rendered by structlog and emitted through the stdlib
``usl`` logger, which writes to stderr. Standard output is left free for
the prediction CSV written by the command line tool.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

import structlog
from structlog.types import FilteringBoundLogger

ROOT_LOGGER = "usl"


def configure_logging(
    level: str = "WARNING",
    format_json: bool = False,
    stream: Optional[IO[str]] = None,
) -> None:
    """
    Configure structlog and the ``usl`` stdlib logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, render JSON lines; otherwise key=value text
        stream: Destination stream, stderr when omitted
    """
    log_level = getattr(logging, level.upper())

    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(log_level)
    root.propagate = False

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Return a structlog logger; output follows whatever configure_logging set up."""
    return structlog.get_logger(name)
