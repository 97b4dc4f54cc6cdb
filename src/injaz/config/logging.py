"""structlog setup shared by the API server, the CLI and the Telegram bridge.

Events are snake_case names with key/value context. Anything bound with
``bind_request_context`` is attached to every event logged while handling
the current request or update.
"""

import logging
import sys
from typing import Any, Literal

import structlog

from injaz.config.settings import get_settings

# Request logging replaces these; they only speak up when debugging
_NOISY_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore", "uvicorn.access")


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None,
    format: Literal["json", "console"] | None = None,
) -> None:
    """Route stdlib and structlog output through one renderer.

    ``level`` and ``format`` default to ``LOG_LEVEL`` and ``LOG_FORMAT``.
    """
    settings = get_settings()
    log_level = level or settings.log_level
    log_format = format or settings.log_format

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level),
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if log_level == "DEBUG" else logging.WARNING)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if log_format == "json":
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stdout.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_request_context(**values: Any) -> None:
    """Start a fresh logging context for one request or bot update."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)
