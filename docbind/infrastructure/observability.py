"""Structured Logging: JSON formatter and setup for handler observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (resource, operation, document_id, error_code) surfaced when present
    - JSON format in production, human-readable otherwise

Design Decisions:
    - setup_logging called once on startup via the app lifespan
    - Library modules only create loggers; configuring handlers is the host's call
"""

import json
import logging
from datetime import datetime, timezone


EXTRA_FIELDS = (
    "resource", "operation", "document_id", "error_code", "path", "count",
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
    """Configure root logging for the application. Returns the installed handler."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
