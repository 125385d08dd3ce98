"""Structured logging setup shared by the API server and the CLI.

Ledger and rollup modules log through ``structlog.get_logger(__name__)`` and
emit one event per state change (``resource_committed``,
``commitment_adjusted``, ``commitment_released``, ``completion_recomputed``)
plus ``commit_rejected`` style events for refused requests.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any

import structlog

LOG_FILE = Path("logs/craftshare.log")

# Libraries that are chatty at INFO
_QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "uvicorn.access")


def configure_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Log level name (defaults to ``LOG_LEVEL`` or INFO)
        log_format: ``json`` for one JSON object per line, anything else for
            the coloured console renderer (defaults to ``LOG_FORMAT`` or text)
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_format = (log_format or os.getenv("LOG_FORMAT", "text")).lower()

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if LOG_FILE.parent.exists():
        handlers.append(logging.FileHandler(LOG_FILE))

    logging.basicConfig(format="%(message)s", handlers=handlers, level=level, force=True)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, logging.getLevelName(level)))
