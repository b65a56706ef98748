"""LFU cache engine built on cachetools.

This adapter implements the CacheEngine protocol with a cost-bounded
cachetools.LFUCache. Every entry carries an explicit cost; the cache evicts
the least frequently used entries once the total cost would exceed
max_cost, and refuses outright an entry whose cost alone exceeds it.

Thread Safety:
    cachetools caches are not thread-safe, so every access goes through a
    single lock.
"""

from __future__ import annotations

import threading
from typing import NamedTuple

from cachetools import LFUCache


class _Entry(NamedTuple):
    value: bytes
    cost: int


def _entry_cost(entry: _Entry) -> int:
    return entry.cost


class LFUCacheEngine:
    """cachetools-backed implementation of the CacheEngine protocol.

    Attributes:
        max_cost: Total cost the cache may hold.
    """

    def __init__(self, max_cost: int) -> None:
        """Initialize the engine.

        Args:
            max_cost: Total cost the cache may hold.

        Raises:
            ValueError: If max_cost < 1.
        """
        if max_cost < 1:
            raise ValueError(f"max_cost must be >= 1, got {max_cost}")

        self._max_cost = max_cost
        self._cache: LFUCache[bytes, _Entry] = LFUCache(maxsize=max_cost, getsizeof=_entry_cost)
        self._lock = threading.Lock()

    @property
    def max_cost(self) -> int:
        return self._max_cost

    @property
    def cost(self) -> int:
        with self._lock:
            return int(self._cache.currsize)

    def get(self, key: bytes) -> bytes | None:
        with self._lock:
            entry = self._cache.get(key)
        return None if entry is None else entry.value

    def set(self, key: bytes, value: bytes, cost: int) -> bool:
        # cachetools raises ValueError for an item larger than the whole cache
        if cost > self._max_cost:
            return False
        with self._lock:
            try:
                self._cache[key] = _Entry(value, cost)
            except ValueError:
                return False
        return True

    def delete(self, key: bytes) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def close(self) -> None:
        """Drop every entry; the engine must not be used afterwards."""
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
