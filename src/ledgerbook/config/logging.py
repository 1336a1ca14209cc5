"""Structured logging for ledgerbook.

Report documents go to stdout, so every log line goes to stderr.
"""

import logging
import sys
from datetime import date
from decimal import Decimal
from typing import Any, Literal

import structlog
from structlog.types import EventDict, WrappedLogger

from ledgerbook.config.settings import get_settings

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]

# Chatty libraries that log every request at INFO.
_QUIET_LOGGERS = ("httpx", "httpcore")


def stringify_amounts(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Render Decimal and date values as strings so any renderer accepts them."""
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = str(value)
        elif isinstance(value, date):
            event_dict[key] = value.isoformat()
    return event_dict


def configure_logging(level: LogLevel | None = None, format: LogFormat | None = None) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        level: Log level. Defaults to ``LOG_LEVEL``.
        format: ``json`` or ``console``. Defaults to ``LOG_FORMAT``.
    """
    settings = get_settings()
    log_level = getattr(logging, level or settings.log_level)
    log_format = format or settings.log_format

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    renderer: structlog.types.Processor
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            stringify_amounts,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_report_context(**values: Any) -> None:
    """Attach values (report name, client id) to every log line of this run."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)
