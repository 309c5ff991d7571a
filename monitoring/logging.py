"""
Structured logging configuration.

structlog renders each event as JSON through the stdlib root logger. Every
event carries the service name and environment of the application that last
configured logging, so several apps built in one process (tests) each log
under their own identity.
"""
import logging
import sys
from typing import Any, Dict

import structlog
from pythonjsonlogger import jsonlogger

from config import Settings

# Filled in by setup_logging(); read by add_app_context on every event.
_app_context: Dict[str, str] = {}

QUIET_LOGGERS = ("uvicorn.access",)


def add_app_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """structlog processor stamping ``app_name`` and ``app_env`` on an event."""
    for key, value in _app_context.items():
        event_dict.setdefault(key, value)
    return event_dict


def _json_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            rename_fields={"timestamp": "@timestamp", "name": "logger"},
        )
    )
    return handler


def setup_logging(settings: Settings) -> None:
    """
    Configure structlog and the root logger from ``settings``.

    Safe to call repeatedly; the latest call wins.

    Args:
        settings: Provides ``log_level``, ``app_name`` and ``app_env``
    """
    level = getattr(logging, settings.log_level.upper())
    _app_context.clear()
    _app_context.update(app_name=settings.app_name, app_env=settings.app_env)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_app_context,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(_json_handler())

    # the request middleware already logs every request
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.get_logger(__name__).info(
        "logging_configured",
        log_level=settings.log_level.upper(),
        app_name=settings.app_name,
    )
