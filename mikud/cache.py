"""In-memory lookup cache with TTL expiry and a size-triggered sweep.

Reads never mutate: a stale entry is simply not returned and is left
for the next sweep. Sweeps only happen after a write pushes the entry
count above the soft bound, and only drop expired entries.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from time import monotonic

from .models import Address

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CacheEntry:
    """A cached zipcode and when it was stored (clock seconds)."""

    zipcode: str
    inserted_at: float


class LookupCache:
    """Address key -> zipcode cache.

    Not locked: meant for a single event loop, where get and put are
    each atomic from the caller's perspective.
    """

    __slots__ = ("ttl", "max_entries", "_clock", "_entries")

    def __init__(
        self,
        ttl: float = 300,
        max_entries: int = 100,
        clock: Callable[[], float] = monotonic,
    ):
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.inserted_at >= self.ttl

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry if present and younger than the TTL."""
        entry = self._entries.get(key)
        if entry is None or self._expired(entry, self._clock()):
            return None
        return entry

    def put(self, key: str, zipcode: str) -> None:
        """Store zipcode under key, sweeping if above the soft bound."""
        self._entries[key] = CacheEntry(zipcode, self._clock())
        if len(self._entries) > self.max_entries:
            self.sweep()

    def sweep(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = self._clock()
        stale = [key for key, entry in self._entries.items() if self._expired(entry, now)]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug(f"Cache sweep removed {len(stale)} expired entries, {len(self._entries)} left")
        return len(stale)

    def clear(self) -> int:
        removed = len(self._entries)
        self._entries.clear()
        return removed

    def stats(self) -> dict:
        return {
            "entries": len(self._entries),
            "ttl_seconds": self.ttl,
            "max_entries": self.max_entries,
            "backend": "memory",
        }

    @staticmethod
    def make_key(address: Address) -> str:
        return address.cache_key()
