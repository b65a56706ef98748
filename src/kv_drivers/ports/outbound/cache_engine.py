"""Cache engine port for the memory driver.

This outbound port describes the in-memory engine the cache store sits on.
The engine is a black box with point operations only:

- set() may be refused by the admission policy (it returns False)
- an admitted set() or a delete() may become observable some time after
  the call returns
- the engine may evict entries on its own to stay within its cost budget
- there is no way to enumerate keys

CacheStore bridges these properties to the synchronous KeyValueStore
contract.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol


class CacheEngine(Protocol):
    """Protocol for a cost-bounded in-memory cache.

    Thread Safety:
        Implementations must be safe for concurrent calls.
    """

    @property
    @abstractmethod
    def max_cost(self) -> int:
        """Return the total cost the engine may hold."""
        ...

    @property
    @abstractmethod
    def cost(self) -> int:
        """Return the total cost currently held."""
        ...

    @abstractmethod
    def get(self, key: bytes) -> bytes | None:
        """Return the value if it is currently visible, else None."""
        ...

    @abstractmethod
    def set(self, key: bytes, value: bytes, cost: int) -> bool:
        """Offer an entry to the engine.

        Returns:
            True if the admission policy accepted it, False otherwise.
        """
        ...

    @abstractmethod
    def delete(self, key: bytes) -> None:
        """Ask the engine to drop key."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Drop every entry."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the engine's memory. The engine must not be used afterwards."""
        ...
