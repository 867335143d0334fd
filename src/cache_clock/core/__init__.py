"""Core building blocks: key derivation, time, statistics, storage, scheduling."""

from cache_clock.core.keys import create_entity_key, hash_key, stringify
from cache_clock.core.scheduler import ExpirationScheduler, Scheduler, ThreadingScheduler
from cache_clock.core.stats import CacheStatistics
from cache_clock.core.store import CacheEntry, EntryStore
from cache_clock.core.time_source import MonotonicTimeSource, TimeSource

__all__ = [
    "CacheEntry",
    "CacheStatistics",
    "EntryStore",
    "ExpirationScheduler",
    "MonotonicTimeSource",
    "Scheduler",
    "ThreadingScheduler",
    "TimeSource",
    "create_entity_key",
    "hash_key",
    "stringify",
]
