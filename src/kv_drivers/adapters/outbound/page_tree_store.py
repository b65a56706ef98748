"""Page-tree store on LMDB.

This adapter implements the KeyValueStore protocol over LMDB, a
memory-mapped B+tree of fixed-size pages with ACID transactions and named
sub-databases. Sub-databases back the store's partitions (buckets).

File Layout:
    The environment is opened with subdir=False, so ``path`` names the data
    file itself and LMDB keeps its lock file next to it (``<path>-lock``).

Partitions:
    - create_partitions() skips empty names, creates each missing partition
      and makes the last non-empty name the active partition.
    - use_partition() switches to an existing partition explicitly.
    - Every read, write and traversal targets the active partition.
    - delete_partitions() raises PartitionNotFoundError for an unknown name.

Transactions:
    - for_each()/key_iterator() run inside one read transaction, so a
      traversal sees a consistent snapshot regardless of concurrent writers.
      A slow visitor keeps that snapshot (and its pages) alive.
    - update() runs inside one write transaction. If execute raises, LMDB
      aborts the transaction and none of its writes become visible.
    - Calling store methods that write from inside update() deadlocks: LMDB
      allows one write transaction per thread.

Thread Safety:
    One writer at a time, many concurrent readers that never block on it.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator

import lmdb

from kv_drivers.domain.errors import (
    EngineError,
    KeyNotFoundError,
    OpenFailureError,
    PartitionNotFoundError,
    StoreClosedError,
)
from kv_drivers.domain.value_objects import EngineType, Options, TransactionGuarantee, to_bytes
from kv_drivers.infrastructure.config import PageTreeConfig
from kv_drivers.infrastructure.logging import get_logger
from kv_drivers.infrastructure.metrics import MetricsRegistry, get_metrics
from kv_drivers.ports.outbound.key_value_store import Visitor
from kv_drivers.ports.outbound.transaction import CallableBucket, Execute

logger = get_logger(__name__)


class PageTreeStore:
    """KeyValueStore over an LMDB environment with named partitions.

    Attributes:
        path: Path of the data file.
        active_partition: Partition targeted by unqualified operations.
    """

    def __init__(
        self,
        path: str | Path,
        options: Options | None = None,
        config: PageTreeConfig | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Open (or create) the data file and the initial partition.

        Args:
            path: Path of the data file.
            options: bucket is created and made active; size overrides the map size.
            config: Page-tree configuration (defaults to PageTreeConfig()).
            metrics: Metrics registry (defaults to the global one).

        Raises:
            OpenFailureError: If the path is empty or LMDB cannot open it.
        """
        options = options or Options()
        config = config or PageTreeConfig()

        self._path = str(path)
        self._metrics = metrics or get_metrics()
        self._lock = threading.RLock()
        self._handles: dict[bytes, Any] = {}
        self._active: bytes | None = None

        if not self._path:
            raise OpenFailureError("on opening page-tree store: empty path")

        try:
            self._env = lmdb.open(
                self._path,
                subdir=False,
                map_size=options.size or config.map_size,
                max_dbs=config.max_partitions,
                sync=config.sync,
            )
        except lmdb.Error as e:
            raise OpenFailureError(f"on opening page-tree store {self._path}: {e}") from e

        self._opened = True
        self._metrics.open_stores.labels(engine=self.engine_type.label).inc()
        try:
            self.create_partitions(options.bucket)
        except EngineError as e:
            self.close()
            raise OpenFailureError(f"on creating partition {options.bucket!r}: {e}") from e

        logger.info(
            "store_opened",
            engine=self.engine_type.label,
            path=self._path,
            partition=self._active.decode("utf-8", "replace") if self._active else None,
        )

    @property
    def engine_type(self) -> EngineType:
        return EngineType.PAGE_TREE

    @property
    def path(self) -> str:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._opened

    @property
    def transaction_guarantee(self) -> TransactionGuarantee:
        return TransactionGuarantee.ATOMIC

    @property
    def active_partition(self) -> bytes | None:
        with self._lock:
            return self._active

    def _check_open(self) -> None:
        if not self._opened:
            raise StoreClosedError(f"page-tree store {self._path} is closed")

    @contextmanager
    def _engine_errors(self, operation: str) -> Generator[None, None, None]:
        """Wrap LMDB failures in EngineError."""
        try:
            yield
        except lmdb.Error as e:
            raise EngineError(f"page-tree {operation} failed: {e}") from e

    def _require_partition(self) -> Any:
        """Return the handle of the active partition."""
        self._check_open()
        with self._lock:
            if self._active is None:
                raise PartitionNotFoundError(None)
            return self._handles[self._active]

    def size(self) -> int:
        """Return the bytes used by the data file's pages."""
        self._check_open()
        with self._engine_errors("size"):
            info = self._env.info()
            stat = self._env.stat()
        return (info["last_pgno"] + 1) * stat["psize"]

    def length(self) -> int:
        """Return the number of keys in the active partition."""
        self._check_open()
        with self._lock:
            handle = self._handles.get(self._active) if self._active is not None else None
        if handle is None:
            return 0
        with self._engine_errors("length"), self._env.begin(db=handle) as txn:
            return int(txn.stat(handle)["entries"])

    def get(self, key: bytes) -> bytes:
        handle = self._require_partition()
        with self._metrics.track(self.engine_type.label, "get"):
            with self._engine_errors("get"), self._env.begin(db=handle) as txn:
                value = txn.get(key)
            if value is None:
                raise KeyNotFoundError(key)
            return value

    def upsert(self, key: bytes, value: bytes) -> None:
        handle = self._require_partition()
        with self._metrics.track(self.engine_type.label, "upsert"):
            with self._engine_errors("upsert"), self._env.begin(write=True, db=handle) as txn:
                txn.put(key, value)

    def delete(self, key: bytes) -> None:
        handle = self._require_partition()
        with self._metrics.track(self.engine_type.label, "delete"):
            with self._engine_errors("delete"), self._env.begin(write=True, db=handle) as txn:
                txn.delete(key)

    def _begin_traversal(self, handle: Any) -> tuple[Any, Any]:
        """Open a read transaction and a cursor over the partition.

        Only this step is wrapped in EngineError; exceptions raised by a
        visitor during the traversal reach the caller unchanged.
        """
        with self._engine_errors("traversal"):
            txn = self._env.begin(db=handle)
            return txn, txn.cursor()

    def for_each(self, visit: Visitor) -> None:
        """Call visit(value) for each entry of one read snapshot, in key order."""
        handle = self._require_partition()
        txn, cursor = self._begin_traversal(handle)
        try:
            for value in cursor.iternext(keys=False, values=True):
                visit(value)
        finally:
            txn.abort()

    def key_iterator(self, visit: Visitor) -> None:
        """Call visit(key) for each key of one read snapshot, in key order."""
        handle = self._require_partition()
        txn, cursor = self._begin_traversal(handle)
        try:
            for key in cursor.iternext(keys=True, values=False):
                visit(key)
        finally:
            txn.abort()

    def update(self, execute: Execute) -> None:
        """Run execute inside one write transaction of the active partition.

        If execute raises, every write it made is rolled back and the
        exception propagates.
        """
        handle = self._require_partition()
        label = self.engine_type.label
        try:
            with self._engine_errors("update"), self._env.begin(write=True, db=handle) as txn:
                with CallableBucket(
                    put_impl=lambda key, value: txn.put(key, value),
                    delete_impl=lambda key: txn.delete(key),
                ) as bucket:
                    execute(bucket)
        except BaseException:
            self._metrics.transactions_total.labels(engine=label, status="abort").inc()
            raise
        self._metrics.transactions_total.labels(engine=label, status="commit").inc()

    def create_partitions(self, *names: bytes | str | None) -> None:
        """Create missing partitions; the last non-empty name becomes active."""
        self._check_open()
        for name in names:
            bucket = to_bytes(name)
            if not bucket:
                continue
            with self._lock:
                if bucket not in self._handles:
                    with self._engine_errors("create partition"):
                        self._handles[bucket] = self._env.open_db(bucket, create=True)
                    logger.info("partition_created", path=self._path, partition=bucket.hex())
                self._active = bucket

    def use_partition(self, name: bytes | str) -> None:
        """Make an existing partition active.

        Raises:
            PartitionNotFoundError: If the partition does not exist.
        """
        self._check_open()
        bucket = to_bytes(name)
        with self._lock:
            self._handles[bucket] = self._open_existing(bucket)
            self._active = bucket

    def partitions(self) -> list[bytes]:
        """Return the names of every partition in the data file."""
        self._check_open()
        # Named databases are recorded as keys of the main database
        with self._engine_errors("list partitions"), self._env.begin() as txn:
            return list(txn.cursor().iternext(keys=True, values=False))

    def _open_existing(self, bucket: bytes) -> Any:
        handle = self._handles.get(bucket)
        if handle is not None:
            return handle
        if not bucket:
            raise PartitionNotFoundError(bucket)
        try:
            return self._env.open_db(bucket, create=False)
        except lmdb.NotFoundError:
            raise PartitionNotFoundError(bucket) from None
        except lmdb.Error as e:
            raise EngineError(f"page-tree open partition failed: {e}") from e

    def delete_partitions(self, *names: bytes | str | None) -> None:
        """Drop partitions and all their keys.

        Raises:
            PartitionNotFoundError: If a named partition does not exist.
        """
        self._check_open()
        for name in names:
            bucket = to_bytes(name)
            with self._lock:
                handle = self._open_existing(bucket)
                with self._engine_errors("delete partition"), self._env.begin(write=True) as txn:
                    txn.drop(handle, delete=True)
                self._handles.pop(bucket, None)
                if self._active == bucket:
                    self._active = None
            logger.info("partition_deleted", path=self._path, partition=bucket.hex())

    def clean(self) -> None:
        """Remove every key from the active partition, keeping the partition."""
        handle = self._require_partition()
        with self._engine_errors("clean"), self._env.begin(write=True) as txn:
            txn.drop(handle, delete=False)

    def close(self) -> None:
        """Close the environment and release the data file."""
        if not self._opened:
            return
        with self._lock:
            self._opened = False
            self._handles.clear()
            self._env.close()
        self._metrics.open_stores.labels(engine=self.engine_type.label).dec()
        logger.info("store_closed", engine=self.engine_type.label, path=self._path)

    def __enter__(self) -> PageTreeStore:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
