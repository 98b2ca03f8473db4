"""Bounded LRU cache of computation responses."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Generic, TypeVar

import cachetools

from taxcalc.request.types import PayFrequency
from taxcalc.response import ComputationResponse

K = TypeVar("K")
V = TypeVar("V")


@dataclass(frozen=True)
class CacheKey:
    """Canonical request fingerprint.

    Fields are kept separate, so ("1.00", "CA", monthly) and ("1.00C", "A",
    monthly) can never collide the way a concatenated string could.
    """

    salary: str
    state: str
    pay_frequency: PayFrequency

    @classmethod
    def of(cls, salary: float, state: str, pay_frequency: PayFrequency) -> CacheKey:
        return cls(salary=f"{salary:.2f}", state=state, pay_frequency=pay_frequency)

    @property
    def fingerprint(self) -> str:
        """Flat string form, e.g. ``60000.00CAmonthly``. Used for logging."""
        return f"{self.salary}{self.state}{self.pay_frequency.label}"

    def __str__(self) -> str:
        return self.fingerprint


class _CountingLRU(cachetools.LRUCache):
    """cachetools LRU that counts the entries it evicts."""

    def __init__(self, maxsize: int):
        super().__init__(maxsize=maxsize)
        self.evictions = 0

    def popitem(self):
        item = super().popitem()
        self.evictions += 1
        return item


class LRUCache(Generic[K, V]):
    """Fixed-capacity least-recently-used map, safe for concurrent use.

    Storage and eviction are cachetools'; the lock makes it thread-safe.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("cache capacity must be at least 1")
        self._entries = _CountingLRU(maxsize=capacity)
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    @property
    def capacity(self) -> int:
        return int(self._entries.maxsize)

    @property
    def evictions(self) -> int:
        return self._entries.evictions

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        """Membership test that does not count as a use."""
        with self._lock:
            return key in self._entries

    def get(self, key: K) -> tuple[V | None, bool]:
        """Return ``(value, True)`` and mark the key used, or ``(None, False)``."""
        with self._lock:
            try:
                value = self._entries[key]
            except KeyError:
                self.misses += 1
                return None, False
            self.hits += 1
            return value, True

    def put(self, key: K, value: V) -> None:
        """Insert or refresh ``key``, evicting the least recently used entry if full."""
        with self._lock:
            self._entries[key] = value


ResponseCache = LRUCache[CacheKey, ComputationResponse]
