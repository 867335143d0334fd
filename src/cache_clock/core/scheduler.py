"""Restartable expiration timer.

``ExpirationScheduler`` is a Stopped/Running state machine over a pluggable
``Scheduler`` capability (``arm``/``cancel``). Each arm is one-shot; the
sweep callback is expected to stop the scheduler, do its work and start it
again, so at most one sweep is ever in flight and each cycle waits the full
interval.
"""

from __future__ import annotations

import logging
import math
import threading
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """Platform timer capability."""

    def arm(self, delay_ms: float, callback: Callable[[], None]) -> Any: ...

    def cancel(self, token: Any) -> None: ...


class ThreadingScheduler:
    """Default scheduler backed by daemon ``threading.Timer`` threads."""

    def arm(self, delay_ms: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay_ms / 1000.0, callback)
        timer.daemon = True
        timer.name = "cache-clock-sweep"
        timer.start()
        return timer

    def cancel(self, token: threading.Timer) -> None:
        token.cancel()


class ExpirationScheduler:
    """Arms one sweep at a time and tracks the Running/Stopped state.

    Args:
        scheduler: Timer capability used to arm and cancel sweeps.
        sweep: Called (under *lock*) when an armed timer fires.
        interval: Returns the current interval in ms. ``0`` or ``inf``
            disables the scheduler.
        on_stop: Called every time a running scheduler is stopped.
        lock: Lock shared with the owner of *sweep*.
        diagnostic: Debug channel, ``diagnostic(event, message, **fields)``.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        sweep: Callable[[], None],
        interval: Callable[[], float],
        on_stop: Callable[[], None],
        lock: threading.RLock,
        diagnostic: Optional[Callable[..., None]] = None,
    ):
        self._scheduler = scheduler
        self._sweep = sweep
        self._interval = interval
        self._on_stop = on_stop
        self._lock = lock
        self._diagnostic = diagnostic or (lambda event, message, **fields: None)
        self._token: Any = None
        self._generation = 0

    @property
    def is_running(self) -> bool:
        return self._token is not None

    def start(self) -> bool:
        """Arm a sweep for the full interval. Returns ``True`` if armed."""
        with self._lock:
            interval = self._interval()
            if interval == 0 or math.isinf(interval):
                self._diagnostic(
                    "scheduler_disabled",
                    "Disabling the clock due to an unsupported interval.",
                    interval_ms=interval,
                )
                return False
            if self._token is not None:
                self._diagnostic(
                    "scheduler_already_running",
                    "Cache clock is already running. Unable to start.",
                )
                return False
            self._generation += 1
            generation = self._generation
            self._token = self._scheduler.arm(
                interval, lambda: self._fire(generation)
            )
            return True

    def stop(self) -> bool:
        """Cancel the pending sweep. Returns ``True`` if one was pending."""
        with self._lock:
            if self._token is None:
                self._diagnostic(
                    "scheduler_not_running",
                    "Cache clock is not running. Unable to stop.",
                )
                return False
            token, self._token = self._token, None
            self._scheduler.cancel(token)
            self._on_stop()
            return True

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A timer that raced a stop() (or a later start()) is stale.
            if self._token is None or generation != self._generation:
                logger.debug("Ignoring stale sweep timer (generation %d)", generation)
                return
            self._sweep()
