"""Counters describing what a cache clock has done."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Dict


@dataclass
class CacheStatistics:
    """Mutable counters updated by every cache operation.

    Counters only grow; they go back to zero through ``reset()`` alone.
    """

    hits: int = 0
    sets: int = 0
    misses: int = 0
    evictions: int = 0
    expired: int = 0
    deletes: int = 0
    overwrites: int = 0
    clears: int = 0
    lifecycles: int = 0

    def reset(self) -> None:
        """Zero every counter in place."""
        for f in fields(self):
            setattr(self, f.name, 0)

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)
