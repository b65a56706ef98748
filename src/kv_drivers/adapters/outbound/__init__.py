"""Outbound adapters - one store per storage engine.

These adapters implement the KeyValueStore port over LMDB, RocksDB and an
in-memory LFU cache, plus the cache engine the memory store sits on.
"""

from kv_drivers.adapters.outbound.cache_store import CacheStore
from kv_drivers.adapters.outbound.lfu_cache_engine import LFUCacheEngine
from kv_drivers.adapters.outbound.log_structured_store import LogStructuredStore
from kv_drivers.adapters.outbound.page_tree_store import PageTreeStore

__all__ = [
    "PageTreeStore",
    "LogStructuredStore",
    "CacheStore",
    "LFUCacheEngine",
]
