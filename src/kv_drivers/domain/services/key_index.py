"""Key index overlay for engines that cannot enumerate their keys.

The memory cache only supports point lookups, so the cache store keeps its
own record of which keys it has written. A key is in the index if and only
if the store believes the engine holds (or will shortly hold) a value for
it: keys are added when a write is issued and removed when a delete is
issued.

The index does not see evictions the engine performs on its own. An entry
may therefore outlive the value it points at, and readers of a snapshot
must tolerate a point lookup that misses.

Thread Safety:
    All methods are thread-safe. The lock is held only for the duration of
    a single mutation or copy, never across engine calls.
"""

from __future__ import annotations

import threading


class KeyIndex:
    """Thread-safe set of keys believed present in a cache engine."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # Insertion-ordered; the value is an unused presence marker
        self._keys: dict[bytes, None] = {}

    def add(self, key: bytes) -> None:
        """Record that a write for key has been issued."""
        with self._lock:
            self._keys[key] = None

    def discard(self, key: bytes) -> bool:
        """Forget key. Returns True if it was recorded."""
        with self._lock:
            if key not in self._keys:
                return False
            del self._keys[key]
            return True

    def snapshot(self) -> list[bytes]:
        """Return a copy of the recorded keys in insertion order.

        Later mutations do not affect the returned list.
        """
        with self._lock:
            return list(self._keys)

    def clear(self) -> None:
        """Forget every key."""
        with self._lock:
            self._keys.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)
