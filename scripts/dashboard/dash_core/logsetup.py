"""Logging configuration: a rotating JSON-lines file for diagnostics.

The terminal belongs to the dashboard, so nothing is logged to stdout or
stderr while it runs. Structured fields travel through
``extra={"fields": {...}}`` and are merged into each JSON record.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

from dash_core.errors import InitializationFailure
from dash_core.settings import Settings

ROOT_LOGGER = "dash_core"

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "caller": f"{record.module}:{record.lineno}",
            "msg": record.getMessage(),
        }
        fields = getattr(record, "fields", None)
        if isinstance(fields, dict):
            for key, value in fields.items():
                payload.setdefault(key, value)
        if record.exc_info:
            payload["stacktrace"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def level_for(name: str) -> int:
    return LEVELS.get(name.lower(), logging.INFO)


def configure_logging(settings: Settings) -> logging.Logger:
    path = Path(settings.log_file)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path,
            maxBytes=settings.log_max_mb * 1024 * 1024,
            backupCount=settings.log_backups,
            encoding="utf-8",
        )
    except OSError as exc:
        raise InitializationFailure(f"cannot open log file {path}: {exc}") from exc

    handler.setFormatter(JsonFormatter())
    logger = logging.getLogger(ROOT_LOGGER)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if settings.debug else level_for(settings.log_level))
    logger.propagate = False
    return logger
