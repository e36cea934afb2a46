"""Structured logging for the order-management backend.

Library modules log through ``logging.getLogger(__name__)`` with
%-style arguments.  :func:`setup_logging` routes those records through
structlog so every line is rendered as JSON (or a console line) and
carries the ``correlation_id`` of the checkout or payment it belongs to.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Any

import structlog

from order_management.core.config import ObservabilityConfig
from order_management.core.ids import new_id

# Loggers that are chatty at INFO and add nothing to order traces.
_QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncio")

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Current correlation id; one is created on first use in a context."""
    cid = _correlation_id.get()
    if not cid:
        cid = new_id()
        _correlation_id.set(cid)
    return cid


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


def new_correlation_id() -> str:
    """Start a new unit of work: generate, set and return a fresh id."""
    cid = new_id()
    _correlation_id.set(cid)
    return cid


def _add_correlation_id(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    event_dict.setdefault("correlation_id", get_correlation_id())
    return event_dict


def build_processors(format: str = "json") -> list[Any]:
    """Processor chain shared by every structlog logger, renderer last."""
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        _add_correlation_id,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


def setup_logging(
    level: str = "INFO",
    format: str = "json",
) -> None:
    """Configure structlog over the stdlib root logger.

    Args:
        level: Root log level name (DEBUG, INFO, WARNING, ERROR).
        format: "json" for production, "console" for development.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=build_processors(format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def setup_logging_from_config(config: ObservabilityConfig) -> None:
    setup_logging(level=config.log_level, format=config.log_format)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
