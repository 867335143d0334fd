"""Environment configuration for cache clocks.

Centralises the environment variables that provide process-wide defaults
for new clocks, and where their diagnostics go.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Union

from cache_clock.exceptions import ConfigurationError

Number = Union[int, float]

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _env_number(name: str, default: Number) -> Number:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    if raw.lower() in ("inf", "infinity"):
        return math.inf
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(name, raw, "number") from None
    if math.isnan(value):
        raise ConfigurationError(name, raw, "number")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ConfigurationError(name, raw, "boolean")


@dataclass
class Settings:
    """Process-wide defaults for cache clocks.

    Values come from environment variables with sensible defaults.
    Durations are milliseconds.
    """

    # Capacity and expiry
    max_items: Number = field(
        default_factory=lambda: _env_number("CACHE_CLOCK_MAX_ITEMS", 1000)
    )
    ttl_ms: Number = field(
        default_factory=lambda: _env_number("CACHE_CLOCK_TTL_MS", math.inf)
    )

    # Sweep
    interval_ms: Number = field(
        default_factory=lambda: _env_number("CACHE_CLOCK_INTERVAL_MS", 15_000)
    )
    auto_start: bool = field(
        default_factory=lambda: _env_bool("CACHE_CLOCK_AUTO_START", True)
    )

    # Logging
    debug: bool = field(
        default_factory=lambda: _env_bool("CACHE_CLOCK_DEBUG", False)
    )
    log_dir: str = field(
        default_factory=lambda: os.environ.get(
            "CACHE_CLOCK_LOG_DIR",
            os.path.expanduser("~/.cache-clock/logs"),
        )
    )
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )

    def to_options(self) -> Dict[str, Any]:
        """Options mapping accepted by ``CacheClock``."""
        return {
            "max_items": self.max_items,
            "ttl": self.ttl_ms,
            "interval": self.interval_ms,
            "auto_start": self.auto_start,
            "debug": self.debug,
        }

    def setup_logging(self) -> str:
        """Configure logging from ``log_dir`` and ``log_level``.

        Returns the path of the JSONL log file.
        """
        from cache_clock.logging_config import setup_logging

        return setup_logging(log_dir=self.log_dir, log_level=self.log_level)
