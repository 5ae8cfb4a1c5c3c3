"""Logging setup: structlog events rendered through stdlib handlers.

Account events log emails and user ids but never credentials; the
``_redact_secrets`` processor masks them if one slips into an event.
"""

from __future__ import annotations

import logging
import logging.config
import os
from collections.abc import MutableMapping
from typing import Any

import structlog

LEVEL_ENV = "CUSTOMER_RECORDS_LOG_LEVEL"
FORMAT_ENV = "CUSTOMER_RECORDS_LOG_FORMAT"

_SECRET_KEYS = frozenset({"password", "password_hash", "access_token", "token", "authorization"})
_REDACTED = "***"


def _redact_secrets(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    for key in _SECRET_KEYS.intersection(event_dict):
        event_dict[key] = _REDACTED
    return event_dict


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    *level* and *log_format* default to ``CUSTOMER_RECORDS_LOG_LEVEL``
    (``INFO``) and ``CUSTOMER_RECORDS_LOG_FORMAT`` (``console`` or ``json``).
    """
    level = (level or os.environ.get(LEVEL_ENV, "INFO")).upper()
    log_format = (log_format or os.environ.get(FORMAT_ENV, "console")).lower()

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _redact_secrets,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": pre_chain,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        _renderer(log_format),
                    ],
                },
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "structlog",
                },
            },
            "root": {"handlers": ["stdout"], "level": level},
            "loggers": {
                "customer_records": {"level": level},
                # request.completed from RequestContextMiddleware replaces access lines
                "uvicorn.access": {"level": "WARNING"},
                "sqlalchemy.engine": {"level": "WARNING"},
                "asyncpg": {"level": "WARNING"},
            },
        }
    )
