"""Structured logging configuration"""
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

LOGGER_NAME = "glint"

# Attributes lifted from ``extra={...}`` into the JSON payload
_EXTRA_FIELDS = (
    "admin_id",
    "request_id",
    "action",
    "path",
    "method",
    "resource_id",
    "cache_key",
    "status_code",
    "duration",
    "error",
)


class JSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, source and any known extras"""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "message": record.getMessage(),
        }
        payload.update(
            (field, getattr(record, field)) for field in _EXTRA_FIELDS if hasattr(record, field)
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """
    Configure the ``glint`` logger to write JSON lines to stdout

    Safe to call repeatedly: the level is updated and the stdout handler is
    installed only once.
    """
    glint_logger = logging.getLogger(LOGGER_NAME)
    glint_logger.setLevel(log_level.upper())
    glint_logger.propagate = False

    if not any(isinstance(h.formatter, JSONFormatter) for h in glint_logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        glint_logger.addHandler(handler)

    return glint_logger


logger = setup_logging()
