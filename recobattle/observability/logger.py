"""JSON log formatting for the recognition core.

Every record becomes one JSON line carrying the level, logger name and
message. Job context passed through `extra` (file_id, job_id, asr, status,
stage) is copied into the line, so a job can be followed across the
upload, worker and store logs by its ids.
"""

import json
import logging
import sys
from datetime import UTC, datetime

EXTRA_FIELDS: tuple[str, ...] = (
    "file_id",
    "job_id",
    "asr",
    "status",
    "stage",
    "duration_seconds",
    "error",
)


class StructuredJsonFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "severity": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in EXTRA_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = str(record.exc_info[1])

        return json.dumps(entry, default=str)


def _json_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredJsonFormatter())
    return handler


def setup_logging(level: str = "INFO") -> None:
    """Send every logger's output through one JSON handler on stdout."""
    root = logging.getLogger()
    root.setLevel(level.upper())
    if not any(
        isinstance(h.formatter, StructuredJsonFormatter) for h in root.handlers
    ):
        root.addHandler(_json_handler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger with its own JSON handler, for use before setup_logging().

    Calling it again for the same name reuses the existing handler.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.addHandler(_json_handler())
        logger.setLevel(logging.DEBUG)
    return logger
