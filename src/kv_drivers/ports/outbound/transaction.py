"""Transaction bridge passed to KeyValueStore.update().

Each engine has its own native transaction API. update() hides it behind a
TransactionBucket bound to whatever primitive the active store provides, so
a multi-step write is written once and runs on every engine:

    def move(bucket: TransactionBucket) -> None:
        bucket.put(b"new", value)
        bucket.delete(b"old")

    store.update(move)

Whether the writes are atomic depends on the store; see
KeyValueStore.transaction_guarantee.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Protocol

from kv_drivers.domain.errors import TransactionClosedError


class TransactionBucket(Protocol):
    """Write capability granted for the duration of one update() call."""

    @abstractmethod
    def put(self, key: bytes, value: bytes) -> None:
        """Insert or replace a key within the transaction."""
        ...

    @abstractmethod
    def delete(self, key: bytes) -> None:
        """Remove a key within the transaction."""
        ...


# User function run by update(); raising rolls back where the store supports it
Execute = Callable[[TransactionBucket], None]


@dataclass
class CallableBucket:
    """TransactionBucket that forwards to a pair of callables.

    Stores build one per update() call, bound to their native primitive,
    and use it as a context manager around execute. Once the block exits
    the bucket is closed and further writes raise TransactionClosedError.
    """

    put_impl: Callable[[bytes, bytes], None]
    delete_impl: Callable[[bytes], None]
    closed: bool = field(default=False, init=False)

    def _check_open(self) -> None:
        if self.closed:
            raise TransactionClosedError("transaction bucket used after update() returned")

    def put(self, key: bytes, value: bytes) -> None:
        self._check_open()
        self.put_impl(key, value)

    def delete(self, key: bytes) -> None:
        self._check_open()
        self.delete_impl(key)

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> CallableBucket:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
