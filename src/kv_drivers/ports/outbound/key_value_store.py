"""Key-value store port: the contract every driver satisfies.

Callers pick an engine through the driver facade and then program only
against this protocol, so changing engines is a configuration change.

Consistency:
    - Read-after-write: once upsert() returns, get() returns the new value
      on every engine, including the asynchronous cache.
    - Traversals (for_each, key_iterator) stop at the first exception raised
      by the visitor and re-raise it unchanged.

Lifecycle:
    After close(), every operation except close(), is_open, engine_type,
    path and transaction_guarantee raises StoreClosedError. close() is
    idempotent.

References:
    - DESIGN.md (Store contract)
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Callable, Protocol, runtime_checkable

from kv_drivers.domain.value_objects import EngineType, TransactionGuarantee
from kv_drivers.ports.outbound.transaction import Execute

# Called once per key or value during a traversal; raise to abort
Visitor = Callable[[bytes], None]


@runtime_checkable
class KeyValueStore(Protocol):
    """Protocol for a key-value store backed by one engine.

    Thread Safety:
        Implementations must be safe for concurrent use by several threads.
        Disk engines allow one writer and many non-blocking readers.
    """

    @property
    @abstractmethod
    def engine_type(self) -> EngineType:
        """Return the engine selector this store was opened with."""
        ...

    @property
    @abstractmethod
    def path(self) -> str:
        """Return the data location, or the cache name for the memory engine."""
        ...

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Return True until close() is called."""
        ...

    @property
    @abstractmethod
    def transaction_guarantee(self) -> TransactionGuarantee:
        """Return what update() promises for this engine."""
        ...

    @property
    @abstractmethod
    def active_partition(self) -> bytes | None:
        """Return the partition unqualified operations target, if any."""
        ...

    @abstractmethod
    def size(self) -> int:
        """Return the store size in bytes, or 0 if not cheaply known."""
        ...

    @abstractmethod
    def length(self) -> int:
        """Return the number of keys, or 0 if not cheaply known."""
        ...

    @abstractmethod
    def get(self, key: bytes) -> bytes:
        """Return the value stored under key.

        Raises:
            KeyNotFoundError: If the key is absent.
        """
        ...

    @abstractmethod
    def upsert(self, key: bytes, value: bytes) -> None:
        """Insert or replace the value stored under key."""
        ...

    @abstractmethod
    def delete(self, key: bytes) -> None:
        """Remove key. Removing an absent key is not an error."""
        ...

    @abstractmethod
    def for_each(self, visit: Visitor) -> None:
        """Call visit(value) for every stored value."""
        ...

    @abstractmethod
    def key_iterator(self, visit: Visitor) -> None:
        """Call visit(key) for every stored key."""
        ...

    @abstractmethod
    def update(self, execute: Execute) -> None:
        """Run execute with a TransactionBucket bound to this store."""
        ...

    @abstractmethod
    def create_partitions(self, *names: bytes | str) -> None:
        """Create named partitions where the engine supports them."""
        ...

    @abstractmethod
    def delete_partitions(self, *names: bytes | str) -> None:
        """Delete named partitions where the engine supports them."""
        ...

    @abstractmethod
    def clean(self) -> None:
        """Remove every key from the active namespace."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release engine resources and mark the store closed."""
        ...
