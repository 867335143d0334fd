"""The cache clock: a bounded, time-aware key/value cache.

Every entry carries its own expiration deadline. Expired entries are
reclaimed lazily when read, and actively by a background sweep armed every
``interval`` ms. When the cache is full the oldest inserted entry is
evicted, whatever its deadline.

    >>> clock = CacheClock(ttl=5 * 60 * 1000)
    >>> entry = clock.set("user:1", {"name": "Ada"})
    >>> clock.get("user:1").value
    {'name': 'Ada'}
"""

from __future__ import annotations

import functools
import logging
import threading
from typing import Any, Dict, Iterator, List, Mapping, Optional

from cache_clock.config import Settings
from cache_clock.core.keys import create_entity_key
from cache_clock.core.scheduler import ExpirationScheduler, Scheduler, ThreadingScheduler
from cache_clock.core.stats import CacheStatistics
from cache_clock.core.store import CacheEntry, EntryStore
from cache_clock.core.time_source import MonotonicTimeSource, TimeSource
from cache_clock.logging_config import log_cache_event, reset_clock_name, set_clock_name
from cache_clock.options import (
    DEFAULT_INTERVAL_MS,
    DEFAULT_OPTIONS,
    SETTER_FIELDS,
    ClockOptions,
    merge_options,
)

logger = logging.getLogger(__name__)


class CacheClock:
    """In-memory cache with per-entry TTL, oldest-first eviction and a sweep.

    Args:
        options: Mapping (or ``ClockOptions``) of initial options. Keyword
            arguments are merged on top. See ``cache_clock.options``.
        time_source: Supplies ``now()`` in ms. Defaults to monotonic time.
        scheduler: Timer capability for the sweep. Defaults to daemon
            ``threading.Timer`` threads.
        name: Label attached to this clock's diagnostics.

    All public operations and the sweep share one re-entrant lock, so an
    ``on_expire`` callback may call back into the clock.
    """

    def __init__(
        self,
        options: Optional[Mapping[str, Any]] = None,
        *,
        time_source: Optional[TimeSource] = None,
        scheduler: Optional[Scheduler] = None,
        name: str = "cache-clock",
        **kwargs: Any,
    ):
        self.name = name
        self._time = time_source or MonotonicTimeSource()
        self._lock = threading.RLock()
        self._store = EntryStore()
        self._stats = CacheStatistics()
        self._birth = self._time.now()
        self._options = DEFAULT_OPTIONS
        self._sweeping = False
        self._resume_after_sweep = True
        self._expiration = ExpirationScheduler(
            scheduler or ThreadingScheduler(),
            sweep=self._prune,
            interval=lambda: self._options.interval,
            on_stop=self._count_lifecycle,
            lock=self._lock,
            diagnostic=functools.partial(self._debug, level=logging.WARNING),
        )

        self.configure(options, **kwargs)

        if self._options.auto_start:
            self.start()

    @classmethod
    def create(cls, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "CacheClock":
        """Alternate constructor, same arguments as ``CacheClock()``."""
        return cls(options, **kwargs)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **kwargs: Any) -> "CacheClock":
        """Build a clock from environment ``Settings``."""
        settings = settings or Settings()
        return cls(settings.to_options(), **kwargs)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def age(self) -> float:
        """Milliseconds since this clock was created."""
        return self._time.now() - self._birth

    @property
    def size(self) -> int:
        """Number of stored entries (expired ones included until reclaimed)."""
        return self._store.size()

    @property
    def options(self) -> ClockOptions:
        return self._options

    @property
    def stats(self) -> CacheStatistics:
        return self._stats

    @property
    def is_running(self) -> bool:
        """Whether a sweep is currently armed."""
        return self._expiration.is_running

    # ------------------------------------------------------------------
    # Configuration and lifecycle
    # ------------------------------------------------------------------

    def configure(self, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> None:
        """Merge *options* over the current options.

        Entries already stored keep their ttl and deadline. Invalid values
        fall back to the previous ones (reported on the debug channel).
        """
        with self._lock:
            merged, problems = merge_options(self._options, options)
            if kwargs:
                merged, more = merge_options(merged, kwargs)
                problems.extend(more)
            self._options = merged

            for problem in problems:
                self._debug("invalid_option", problem, level=logging.WARNING)
            if 0 < merged.interval < DEFAULT_INTERVAL_MS:
                self._debug(
                    "interval_too_short",
                    "A cache clock interval less than 15 seconds is not recommended.",
                    level=logging.WARNING,
                    interval_ms=merged.interval,
                )

    def start(self) -> bool:
        """Arm the sweep for a full interval.

        A no-op (with a diagnostic) when already running or when the
        interval is ``0`` or ``inf``. Returns whether a sweep was armed.
        """
        with self._lock:
            if self._sweeping:
                self._resume_after_sweep = True
            return self._expiration.start()

    def stop(self) -> bool:
        """Cancel the pending sweep.

        Entries are still expired lazily on access. Returns whether a sweep
        was pending. Called from ``on_expire``, it keeps the clock stopped
        once the current sweep finishes and returns ``True``.
        """
        with self._lock:
            if self._sweeping:
                self._resume_after_sweep = False
                return True
            return self._expiration.stop()

    def get_cache_key(self, value: Any) -> str:
        """Derived lookup key for *value*."""
        return create_entity_key(value)

    # ------------------------------------------------------------------
    # Cache operations
    # ------------------------------------------------------------------

    def set(
        self,
        key: Any,
        value: Any,
        options: Optional[Mapping[str, Any]] = None,
        **kwargs: Any,
    ) -> CacheEntry:
        """Store *value* under *key* and return the stored entry.

        ``ttl`` and ``overwrite`` may be given per call, either in *options*
        or as keyword arguments. When a live entry already exists and
        overwrite is off, that existing entry is returned untouched.
        """
        hashed = create_entity_key(key)
        with self._lock:
            effective, problems = merge_options(self._options, options, allowed=SETTER_FIELDS)
            if kwargs:
                effective, more = merge_options(effective, kwargs, allowed=SETTER_FIELDS)
                problems.extend(more)
            for problem in problems:
                self._debug("invalid_option", problem, level=logging.WARNING)

            now = self._time.now()
            existing = self._store.lookup(hashed)
            if existing is not None and self._reclaim_if_expired(existing, now):
                existing = None

            if existing is not None:
                if not effective.overwrite:
                    self._debug(
                        "set_rejected",
                        f'Unable to set cache item "{hashed}". The item already exists.',
                        key=hashed,
                    )
                    return existing
                self._debug(
                    "overwrite",
                    f'Overwriting existing cache entry for key "{hashed}".',
                    key=hashed,
                )
                self._store.remove(hashed)
                self._stats.overwrites += 1

            while self._store.size() >= self._options.max_items:
                self._evict_oldest()

            entry = CacheEntry.create(hashed, value, effective.ttl, now)
            self._store.insert(hashed, entry)
            self._stats.sets += 1
            return entry

    def get(self, key: Any, is_hashed: bool = False) -> Optional[CacheEntry]:
        """Return the live entry for *key*, or ``None``.

        An expired entry is removed on the spot. With
        ``reset_timeout_on_access`` the entry's deadline moves to
        ``now + ttl``.
        """
        hashed = create_entity_key(key, is_hashed)
        with self._lock:
            entry = self._store.lookup(hashed)
            if entry is None:
                self._stats.misses += 1
                return None

            now = self._time.now()
            if self._reclaim_if_expired(entry, now):
                self._stats.misses += 1
                return None

            if self._options.reset_timeout_on_access:
                entry.refresh(now)
            self._stats.hits += 1
            return entry

    def delete(self, key: Any, is_hashed: bool = False) -> Optional[CacheEntry]:
        """Remove *key* and return its entry, or ``None`` if absent."""
        hashed = create_entity_key(key, is_hashed)
        with self._lock:
            entry = self._store.remove(hashed)
            if entry is None:
                return None
            self._debug("delete", f"Deleting cache item {hashed}.", level=logging.INFO, key=hashed)
            self._stats.deletes += 1
            return entry

    def has(self, key: Any, is_hashed: bool = False) -> bool:
        """Whether a live entry exists. Counts as a ``get`` in the stats."""
        return self.get(create_entity_key(key, is_hashed), is_hashed=True) is not None

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._store.clear()
            self._stats.clears += 1

    def reset_stats(self) -> None:
        """Zero every counter. Entries are untouched."""
        with self._lock:
            self._stats.reset()

    def to_list(self) -> List[Dict[str, Any]]:
        """Plain-dict export of all entries in insertion order."""
        with self._lock:
            return [entry.to_dict() for entry in self._store.snapshot()]

    def __iter__(self) -> Iterator[CacheEntry]:
        with self._lock:
            return iter(self._store.snapshot())

    def __len__(self) -> int:
        return self._store.size()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, size={self.size}, "
            f"max_items={self._options.max_items!r}, running={self.is_running})"
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _prune(self) -> None:
        """Sweep pass run by the expiration scheduler."""
        with self._lock:
            self._expiration.stop()
            self._sweeping = True
            self._resume_after_sweep = True
            try:
                now = self._time.now()
                reclaimed = 0
                for entry in self._store.snapshot():
                    if not entry.is_expired(now):
                        continue
                    if self._store.remove(entry.key) is None:
                        continue
                    self._stats.expired += 1
                    reclaimed += 1
                    self._notify_expired(entry)
                if reclaimed:
                    self._debug(
                        "sweep",
                        f"Sweep reclaimed {reclaimed} expired item(s).",
                        level=logging.INFO,
                        expired=reclaimed,
                        size=self._store.size(),
                    )
            finally:
                self._sweeping = False
                if self._resume_after_sweep:
                    self._expiration.start()

    def _notify_expired(self, entry: CacheEntry) -> None:
        callback = self._options.on_expire
        if callback is None:
            return
        try:
            callback(entry)
        except Exception as e:
            logger.exception(
                "on_expire callback failed for key %s",
                entry.key,
                extra={"event": "on_expire_failed", "key": entry.key, "error_type": type(e).__name__},
            )

    def _reclaim_if_expired(self, entry: CacheEntry, now: float) -> bool:
        if not entry.is_expired(now):
            return False
        self._debug("expired", f"Cache item {entry.key} has expired.", level=logging.INFO, key=entry.key)
        self._store.remove(entry.key)
        self._stats.expired += 1
        return True

    def _evict_oldest(self) -> None:
        oldest = self._store.oldest_key()
        if oldest is None:
            return
        self._debug(
            "evict",
            "The cache is full, removing oldest item.",
            key=oldest,
            size=self._store.size(),
            max_items=self._options.max_items,
        )
        self._store.remove(oldest)
        self._stats.evictions += 1

    def _count_lifecycle(self) -> None:
        self._stats.lifecycles += 1

    def _debug(self, event: str, message: str, level: int = logging.WARNING, **fields: Any) -> None:
        if not self._options.debug:
            return
        token = set_clock_name(self.name)
        try:
            log_cache_event(event, message, level=level, **fields)
        finally:
            reset_clock_name(token)
