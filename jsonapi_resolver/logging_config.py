from __future__ import annotations

import logging
import sys
from typing import cast

import structlog

from jsonapi_resolver.config import DEFAULT_LOG_LEVEL, ClientSettings

_configured = False


def configure_logging(level: str = DEFAULT_LOG_LEVEL, *, json: bool = False, force: bool = False) -> None:
    """Route structlog through stdlib logging on stderr.

    Idempotent: later calls are ignored unless ``force`` is set.
    """
    global _configured
    if _configured and not force:
        return

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"unknown log level: {level!r}")

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level, force=force)

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer(colors=False)
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]
    structlog.configure(
        processors=cast("list[structlog.types.Processor]", processors),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _configured = True


def configure_from_settings(settings: ClientSettings | None = None, *, force: bool = False) -> None:
    """Apply ``log_level`` and ``log_json`` from the client settings."""
    settings = settings or ClientSettings.load()
    configure_logging(settings.log_level, json=settings.log_json, force=force)


def is_configured() -> bool:
    return _configured


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """structlog logger backed by the stdlib logger ``name``.

    Level filtering is left to stdlib logging, so library debug events stay
    quiet until the application lowers the level.
    """
    return structlog.wrap_logger(logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger)
