"""Shared fixtures: a hand-driven clock and scheduler."""

import pytest

from cache_clock import CacheClock


class ManualTime:
    """Time source whose ``now()`` only moves when a test says so."""

    def __init__(self, start: float = 0.0) -> None:
        self.current = start

    def now(self) -> float:
        return self.current


class ManualScheduler:
    """Scheduler capability that records armed timers instead of running them.

    ``advance(ms)`` moves the paired ``ManualTime`` forward and fires every
    timer whose deadline has passed, in deadline order.
    """

    def __init__(self, time: ManualTime) -> None:
        self.time = time
        self.timers = {}
        self._next_token = 0
        self.armed = 0
        self.cancelled = 0

    def arm(self, delay_ms, callback):
        self._next_token += 1
        self.timers[self._next_token] = (self.time.now() + delay_ms, callback)
        self.armed += 1
        return self._next_token

    def cancel(self, token):
        if self.timers.pop(token, None) is not None:
            self.cancelled += 1

    @property
    def pending(self) -> int:
        return len(self.timers)

    def advance(self, ms: float) -> None:
        target = self.time.now() + ms
        while True:
            due = [
                (deadline, token)
                for token, (deadline, _) in self.timers.items()
                if deadline <= target
            ]
            if not due:
                break
            deadline, token = min(due)
            _, callback = self.timers.pop(token)
            self.time.current = deadline
            callback()
        self.time.current = target


@pytest.fixture
def manual_time():
    return ManualTime()


@pytest.fixture
def manual_scheduler(manual_time):
    return ManualScheduler(manual_time)


@pytest.fixture
def make_clock(manual_time, manual_scheduler):
    """Factory for clocks wired to the manual time source and scheduler."""
    clocks = []

    def _make(options=None, **kwargs):
        clock = CacheClock(
            options,
            time_source=manual_time,
            scheduler=manual_scheduler,
            **kwargs,
        )
        clocks.append(clock)
        return clock

    yield _make

    for clock in clocks:
        if clock.is_running:
            clock.stop()
