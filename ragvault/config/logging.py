"""Logging setup for the ``ragvault`` logger tree.

Components log through children of ``ragvault`` and attach
``extra={"operation", "document_id", "step"}`` to records about multi-store
operations. The JSON formatter surfaces those fields under ``context``.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any

ROOT_LOGGER = "ragvault"
TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord has; anything else came in through ``extra=``
_STANDARD_ATTRS = set(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {
    "message",
    "asctime",
}


def _record_context(record: logging.LogRecord) -> dict[str, str]:
    return {
        key: str(value) for key, value in record.__dict__.items() if key not in _STANDARD_ATTRS
    }


class JSONExceptionFormatter(logging.Formatter):
    """One JSON object per record: level, message, source location, context, exception."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": {
                "file": record.filename,
                "function": record.funcName,
                "line": record.lineno,
            },
        }

        context = _record_context(record)
        if context:
            entry["context"] = context

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value) if exc_value else None,
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(entry)


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    json_format: bool = False,
) -> logging.Logger:
    """Route the ``ragvault`` logger to stderr and, optionally, a file.

    Calling it again replaces the handlers installed by the previous call.
    Unknown level names fall back to INFO.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    formatter = (
        JSONExceptionFormatter()
        if json_format
        else logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """``ragvault`` itself, or its child ``ragvault.<name>``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)
