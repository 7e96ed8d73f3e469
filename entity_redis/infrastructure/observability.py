"""Structured Logging - JSON formatter and setup for mapping and store events.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (entity_type, key_name, mutation_count, error_code, ...)
      surfaced when present
    - JSON format in production, human-readable in development

Design Decisions:
    - JSONFormatter on stdlib logging: library modules only call
      logging.getLogger(__name__); the host decides whether to call setup_logging
    - setup_logging_from(settings) applies ENTITY_REDIS_LOG_LEVEL / _LOG_FORMAT
"""

import logging
import json
from datetime import datetime, timezone

from entity_redis.config import Settings, get_settings

EXTRA_FIELDS = (
    "entity_type", "property_name", "key_name", "operation",
    "mutation_count", "command_count", "error_code", "database",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Configure root logging; returns the installed handler."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler


def setup_logging_from(settings: Settings | None = None) -> logging.Handler:
    """setup_logging with level and format taken from Settings."""
    settings = settings or get_settings()
    return setup_logging(settings.log_level, settings.log_format)
