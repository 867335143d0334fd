"""Structured JSON logging for cache clocks.

Provides:
- StructuredJsonFormatter: JSON-line output with clock name, event and cache fields
- RotatingFileHandler: 10MB x 5 files to ~/.cache-clock/logs/cache_clock.jsonl
- Human-readable stderr handler
- contextvars for the name of the clock currently emitting diagnostics
"""

from __future__ import annotations

import contextvars
import json
import logging
import logging.handlers
import os
from pathlib import Path
from typing import Any, Dict

# ---------------------------------------------------------------------------
# Clock name via contextvars (thread-safe)
# ---------------------------------------------------------------------------
_clock_name: contextvars.ContextVar[str] = contextvars.ContextVar(
    "clock_name", default=""
)


def set_clock_name(name: str) -> contextvars.Token:
    """Set the clock name for the current context."""
    return _clock_name.set(name)


def reset_clock_name(token: contextvars.Token) -> None:
    """Restore the clock name that was active before ``set_clock_name``."""
    _clock_name.reset(token)


def get_clock_name() -> str:
    """Get the clock name for the current context."""
    return _clock_name.get()


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------
STRUCTURED_FIELDS = (
    "event", "key", "size", "max_items", "ttl_ms",
    "interval_ms", "expired", "error_type", "error",
)


class StructuredJsonFormatter(logging.Formatter):
    """Formats log records as single-line JSON (JSONL).

    Output includes:
    - timestamp (ISO 8601)
    - level
    - clock (from contextvars)
    - logger name
    - message
    - Any of ``STRUCTURED_FIELDS`` passed via `extra={}` in the log call
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S")
            + f".{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        clock = _clock_name.get()
        if clock:
            log_entry["clock"] = clock

        for key in STRUCTURED_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Setup function
# ---------------------------------------------------------------------------
def setup_logging(
    log_dir: str = "",
    log_level: str = "INFO",
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
) -> str:
    """Configure structured logging for cache clock diagnostics.

    - JSON file handler -> <log_dir>/cache_clock.jsonl
    - Human-readable stderr handler

    Returns the path of the JSONL log file.
    """
    if not log_dir:
        log_dir = os.path.expanduser("~/.cache-clock/logs")

    Path(log_dir).mkdir(parents=True, exist_ok=True)
    log_file = os.path.join(log_dir, "cache_clock.jsonl")

    level = getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    file_handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(StructuredJsonFormatter())
    file_handler.setLevel(logging.DEBUG)
    root.addHandler(file_handler)

    stderr_handler = logging.StreamHandler()
    stderr_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    stderr_handler.setLevel(level)
    root.addHandler(stderr_handler)

    return log_file


# ---------------------------------------------------------------------------
# Structured log helper (used by the clock and its scheduler)
# ---------------------------------------------------------------------------
_structured_logger = logging.getLogger("cache_clock.structured")


def log_cache_event(
    event: str,
    message: str,
    level: int = logging.DEBUG,
    **fields: Any,
) -> None:
    """Log a cache diagnostic with structured extras."""
    extra: Dict[str, Any] = {"event": event}
    for name, value in fields.items():
        if name in STRUCTURED_FIELDS and value is not None:
            extra[name] = _sanitize_value(value)
    _structured_logger.log(level, message, extra=extra)


def _sanitize_value(value: Any) -> Any:
    """Shorten long strings so a hostile key cannot flood the log."""
    if isinstance(value, str) and len(value) > 200:
        return value[:100] + f"...({len(value)} chars)"
    return value
