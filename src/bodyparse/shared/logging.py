"""structlog setup for the bodyparse service.

Request-scoped fields (``path``, ``method``, ``media_type``) are bound by
``BodyParseMiddleware`` through ``structlog.contextvars`` and merged into
every event logged while the request is handled.
"""

import logging
import sys
from typing import Any, cast

import structlog

from bodyparse.config import Settings, get_settings

# Per-request access lines duplicate the events the middleware logs
_QUIET_LOGGERS = ("uvicorn.access",)


def _renderer(settings: Settings) -> Any:
    if settings.is_development:
        return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    return structlog.processors.JSONRenderer()


def setup_logging(settings: Settings | None = None) -> None:
    """Route structlog events through stdlib logging on stdout."""
    settings = settings or get_settings()
    level = logging.DEBUG if settings.app_debug else logging.INFO

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if not settings.is_development:
        processors.append(structlog.processors.format_exc_info)
    processors.append(_renderer(settings))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    for logger_name in _QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
