"""cache-clock: an in-memory, time-aware key/value cache.

Architecture:
    core/       — key derivation, time sources, statistics, entry store, sweep scheduler
    clock.py    — CacheClock, the public cache engine
    options.py  — ClockOptions model and the lenient merge rules
    config.py   — Settings dataclass (environment defaults)
    exceptions.py — structured exceptions
    logging_config.py — Structured JSON logging for diagnostics
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "CacheClock",
    "CacheEntry",
    "CacheStatistics",
    "ClockOptions",
    "Settings",
    "CacheClockError",
    "ConfigurationError",
    "KeyDerivationError",
]

from cache_clock.clock import CacheClock as CacheClock
from cache_clock.config import Settings as Settings
from cache_clock.core.stats import CacheStatistics as CacheStatistics
from cache_clock.core.store import CacheEntry as CacheEntry
from cache_clock.exceptions import (
    CacheClockError as CacheClockError,
    ConfigurationError as ConfigurationError,
    KeyDerivationError as KeyDerivationError,
)
from cache_clock.options import ClockOptions as ClockOptions
