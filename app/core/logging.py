"""Logging setup for the API process.

Everything goes to stdout through one root handler so container runtimes can
collect it. Records emitted while a request is being served carry that
request's id, which makes auth events traceable back to the HTTP call.

Driven by environment variables rather than ``Settings`` so it can run
before settings are loaded.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
import sys
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

# Set by RequestLoggingMiddleware for the duration of a request
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

_EXTRA_KEYS = (
    "method",
    "path",
    "query",
    "status_code",
    "duration_ms",
    "client_ip",
    "user_agent",
    "error_type",
)

_TRUTHY = {"1", "true", "t", "yes", "y", "on"}


def env_bool(name: str, *, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


class RequestIdFilter(logging.Filter):
    """Stamp ``record.request_id`` from the current request context."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_var.get() or "-"
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "msg": record.getMessage(),
        }
        payload.update(
            {key: record.__dict__[key] for key in _EXTRA_KEYS if key in record.__dict__}
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def build_logging_config(
    *,
    level: str,
    log_json: bool,
    uvicorn_access: bool,
    sql_level: str,
) -> dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_id": {"()": "app.core.logging.RequestIdFilter"}},
        "formatters": {
            "text": {
                "format": (
                    "%(asctime)s | %(levelname)s | %(name)s | "
                    "%(request_id)s | %(message)s"
                ),
            },
            "json": {"()": "app.core.logging.JsonFormatter"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "json" if log_json else "text",
                "filters": ["request_id"],
                "stream": sys.stdout,
            }
        },
        "root": {"handlers": ["console"], "level": level},
        "loggers": {
            # Uvicorn installs its own handlers; route everything via root.
            "uvicorn": {"level": level, "propagate": True},
            "uvicorn.error": {"level": level, "propagate": True},
            "uvicorn.access": {
                "level": "INFO" if uvicorn_access else "WARNING",
                "propagate": True,
            },
            "sqlalchemy.engine": {"level": sql_level, "propagate": True},
        },
    }


def configure_logging() -> None:
    """Apply the logging config.

    Env vars:
    - LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
    - LOG_JSON: one JSON object per line (default: false)
    - LOG_REQUESTS: request logging middleware (default: true)
    - LOG_UVICORN_ACCESS: uvicorn access log; defaults to the opposite of
      LOG_REQUESTS so each request is logged once
    - SQL_LOG_LEVEL: SQLAlchemy engine logs (default: WARNING)
    """
    log_requests = env_bool("LOG_REQUESTS", default=True)
    config = build_logging_config(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_json=env_bool("LOG_JSON", default=False),
        uvicorn_access=env_bool("LOG_UVICORN_ACCESS", default=not log_requests),
        sql_level=os.getenv("SQL_LOG_LEVEL", "WARNING").upper(),
    )
    logging.config.dictConfig(config)
