"""
KV Drivers - Polymorphic Key-Value Storage

One key-value contract over three interchangeable engines: an LMDB page
tree with named partitions, a RocksDB log-structured store, and an
in-memory LFU cache made synchronous and enumerable by a key index.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"

from kv_drivers.application import open_configured_store, open_store
from kv_drivers.domain.errors import (
    AdmissionRejectedError,
    EmptyPathError,
    EngineError,
    KeyNotFoundError,
    OpenFailureError,
    PartitionNotFoundError,
    StorageError,
    StoreClosedError,
    TransactionClosedError,
    UnknownEngineError,
    VisibilityTimeoutError,
)
from kv_drivers.domain.value_objects import (
    DEFAULT_OPTIONS,
    EngineType,
    Options,
    TransactionGuarantee,
    driver_options,
)
from kv_drivers.ports.outbound import KeyValueStore, TransactionBucket

__all__ = [
    "open_store",
    "open_configured_store",
    "EngineType",
    "TransactionGuarantee",
    "Options",
    "DEFAULT_OPTIONS",
    "driver_options",
    "KeyValueStore",
    "TransactionBucket",
    "StorageError",
    "EmptyPathError",
    "UnknownEngineError",
    "OpenFailureError",
    "KeyNotFoundError",
    "PartitionNotFoundError",
    "AdmissionRejectedError",
    "VisibilityTimeoutError",
    "StoreClosedError",
    "TransactionClosedError",
    "EngineError",
]
