"""Ports layer - interfaces for adapters.

Ports define contracts that adapters implement:
- KeyValueStore: the store contract shared by every engine
- TransactionBucket: the write capability passed into update()
- CacheEngine: the in-memory engine behind the cache driver
"""

from kv_drivers.ports.outbound import (
    CacheEngine,
    CallableBucket,
    Execute,
    KeyValueStore,
    TransactionBucket,
    Visitor,
)

__all__ = [
    "KeyValueStore",
    "Visitor",
    "TransactionBucket",
    "CallableBucket",
    "Execute",
    "CacheEngine",
]
