"""Insertion-ordered entry table backing the cache clock."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional


@dataclass
class CacheEntry:
    """One cached value.

    Attributes:
        key: Derived lookup key.
        value: Caller-supplied payload.
        ttl: Time to live in ms; ``math.inf`` never expires.
        expires_at: Absolute deadline in ms (``math.inf`` when ttl is infinite).
    """

    key: str
    value: Any
    ttl: float
    expires_at: float

    @classmethod
    def create(cls, key: str, value: Any, ttl: float, now: float) -> "CacheEntry":
        return cls(key=key, value=value, ttl=ttl, expires_at=now + ttl)

    def is_expired(self, now: float) -> bool:
        return self.expires_at <= now

    def refresh(self, now: float) -> None:
        """Push the deadline out to ``now + ttl``."""
        self.expires_at = now + self.ttl

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "value": self.value,
            "ttl": self.ttl,
            "expires_at": self.expires_at,
        }


class EntryStore:
    """Key -> entry mapping whose iteration order is insertion order.

    ``insert`` on an existing key keeps that key's position; remove it
    first to move it to the newest slot.
    """

    def __init__(self) -> None:
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()

    def insert(self, key: str, entry: CacheEntry) -> None:
        self._entries[key] = entry

    def remove(self, key: str) -> Optional[CacheEntry]:
        return self._entries.pop(key, None)

    def lookup(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def oldest_key(self) -> Optional[str]:
        return next(iter(self._entries), None)

    def size(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def snapshot(self) -> List[CacheEntry]:
        """Materialised copy of the entries, safe to iterate while mutating."""
        return list(self._entries.values())

    def __iter__(self) -> Iterator[CacheEntry]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
