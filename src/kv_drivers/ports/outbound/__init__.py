"""Outbound ports - interfaces for the storage engines.

Outbound ports define the store contract callers program against, the
transaction bridge handed to update(), and the black-box cache engine the
memory driver depends on.
"""

from kv_drivers.ports.outbound.cache_engine import CacheEngine
from kv_drivers.ports.outbound.key_value_store import KeyValueStore, Visitor
from kv_drivers.ports.outbound.transaction import CallableBucket, Execute, TransactionBucket

__all__ = [
    "KeyValueStore",
    "Visitor",
    "TransactionBucket",
    "CallableBucket",
    "Execute",
    "CacheEngine",
]
