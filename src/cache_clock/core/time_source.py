"""Time sources for the cache clock (milliseconds)."""

from __future__ import annotations

import time
from typing import Protocol


class TimeSource(Protocol):
    """Anything with a non-decreasing ``now()`` in milliseconds."""

    def now(self) -> float: ...


class MonotonicTimeSource:
    """Default time source backed by ``time.monotonic``.

    Monotonic time is immune to wall-clock adjustments, so expiry deadlines
    never jump.
    """

    def now(self) -> float:
        return time.monotonic() * 1000.0
