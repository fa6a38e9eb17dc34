"""Logging setup shared by the CLI and embedding applications."""

from __future__ import annotations

import json
import logging
import sys

LOGGER_NAME = "showtrack"

# Fields the pipeline attaches with ``extra=``
EVENT_FIELDS = ("event", "stage", "failed", "provider", "warnings_count")


class _EventDefault(logging.Filter):
    """Give records logged without ``extra={"event": ...}`` a placeholder."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "event"):
            record.event = "-"
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record, event fields included."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }
        for field in EVENT_FIELDS:
            value = getattr(record, field, None)
            if value is not None and value != "-":
                entry[field] = value
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Send ``showtrack`` log records to stderr.

    Args:
        level: Minimum level name, e.g. ``"DEBUG"`` or ``"WARNING"``.
        json_format: Emit one JSON object per line instead of the
            human-readable format.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level!r}")

    if json_format:
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(name)-28s] %(levelname)-7s %(event)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(_EventDefault())
    handler.setFormatter(formatter)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)
    logger.handlers.clear()
    logger.addHandler(handler)
