"""
Structured logging for recordspine.

Library modules never configure logging themselves; they obtain a logger
with :func:`get_logger` and emit event-style messages with keyword context::

    logger = get_logger(__name__)
    logger.debug("query_compiled", table="users", sql=sql)

Applications call :func:`configure_logging` once at startup to choose the
level and renderer.

Architecture:
    ::

        configure_logging(level=None, json_format=None, service="recordspine")
            ↓
        structlog processor chain:
          1. filter_by_level + TimeStamper (iso, utc)
          2. add_log_level / add_logger_name
          3. add_service_metadata
          4. JSONRenderer (non-tty) or ConsoleRenderer (tty)
            ↓
        stdlib logging (LoggerFactory), "recordspine" logger at ``level``

Tags:
    logging, structlog, observability, recordspine
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from recordspine.settings import get_settings

_SERVICE_NAME = "recordspine"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service", _SERVICE_NAME)
    return event_dict


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    service: str = "recordspine",
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR); None reads RECORDSPINE_LOG_LEVEL
        json_format: True for JSON, False for console, None reads RECORDSPINE_LOG_JSON
            and falls back to auto (JSON if not tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    settings = get_settings()
    level = level or settings.log_level
    if json_format is None:
        json_format = settings.log_json
    if json_format is None:
        json_format = not sys.stdout.isatty()

    shared_processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(1, structlog.processors.TimeStamper(fmt="iso", utc=True))

    if json_format:
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )
    logging.getLogger("recordspine").setLevel(getattr(logging, level.upper()))


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
