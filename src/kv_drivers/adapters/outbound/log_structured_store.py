"""Log-structured store on RocksDB.

This adapter implements the KeyValueStore protocol over RocksDB through
rocksdict, opened in raw mode so keys and values are stored as plain bytes.
``path`` is a directory owned by the database.

Partitions:
    RocksDB's column families are not used: the store is one flat
    namespace. create_partitions() and delete_partitions() accept any names
    and do nothing, so callers that ask for isolation on this engine share
    a single keyspace.

Transactions:
    update() collects puts and deletes in a WriteBatch and writes it in one
    atomic step after execute returns. If execute raises, the batch is
    discarded and nothing is written.

Sizes:
    size() and length() are placeholders that always return 0. A zero here
    does not mean the store is empty.

Thread Safety:
    RocksDB serializes writers internally. Traversals iterate over a
    snapshot taken when they start and never block writers.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from rocksdict import Options as RocksOptions
from rocksdict import Rdict, WriteBatch

from kv_drivers.domain.errors import (
    EmptyPathError,
    EngineError,
    KeyNotFoundError,
    OpenFailureError,
    StoreClosedError,
)
from kv_drivers.domain.value_objects import EngineType, Options, TransactionGuarantee
from kv_drivers.infrastructure.config import LogStructuredConfig
from kv_drivers.infrastructure.logging import get_logger
from kv_drivers.infrastructure.metrics import MetricsRegistry, get_metrics
from kv_drivers.ports.outbound.key_value_store import Visitor
from kv_drivers.ports.outbound.transaction import CallableBucket, Execute

logger = get_logger(__name__)


class LogStructuredStore:
    """KeyValueStore over a RocksDB database without partitions.

    Attributes:
        path: Directory of the database.
    """

    def __init__(
        self,
        path: str | Path,
        options: Options | None = None,
        config: LogStructuredConfig | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Open (or create) the database directory.

        Args:
            path: Database directory.
            options: Accepted for a uniform signature; no field applies.
            config: Log-structured configuration (defaults to LogStructuredConfig()).
            metrics: Metrics registry (defaults to the global one).

        Raises:
            EmptyPathError: If path is empty.
            OpenFailureError: If RocksDB cannot open the directory.
        """
        config = config or LogStructuredConfig()

        self._path = str(path)
        self._metrics = metrics or get_metrics()

        if not self._path:
            raise EmptyPathError("empty path")

        self._rocks_options = RocksOptions(raw_mode=True)
        self._rocks_options.create_if_missing(config.create_if_missing)
        try:
            self._db = Rdict(self._path, self._rocks_options)
        except Exception as e:
            raise OpenFailureError(f"on opening log-structured store {self._path}: {e}") from e

        self._opened = True
        self._metrics.open_stores.labels(engine=self.engine_type.label).inc()
        logger.info("store_opened", engine=self.engine_type.label, path=self._path)

    @property
    def engine_type(self) -> EngineType:
        return EngineType.LOG_STRUCTURED

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
        return None

    def _check_open(self) -> None:
        if not self._opened:
            raise StoreClosedError(f"log-structured store {self._path} is closed")

    @contextmanager
    def _engine_errors(self, operation: str) -> Generator[None, None, None]:
        """Wrap RocksDB failures in EngineError."""
        try:
            yield
        except Exception as e:
            raise EngineError(f"log-structured {operation} failed: {e}") from e

    def size(self) -> int:
        """Placeholder: always 0."""
        self._check_open()
        return 0

    def length(self) -> int:
        """Placeholder: always 0."""
        self._check_open()
        return 0

    def get(self, key: bytes) -> bytes:
        self._check_open()
        with self._metrics.track(self.engine_type.label, "get"):
            with self._engine_errors("get"):
                value = self._db.get(key)
            if value is None:
                raise KeyNotFoundError(key)
            return value

    def upsert(self, key: bytes, value: bytes) -> None:
        self._check_open()
        with self._metrics.track(self.engine_type.label, "upsert"):
            with self._engine_errors("upsert"):
                self._db.put(key, value)

    def delete(self, key: bytes) -> None:
        self._check_open()
        with self._metrics.track(self.engine_type.label, "delete"):
            with self._engine_errors("delete"):
                self._db.delete(key)

    def for_each(self, visit: Visitor) -> None:
        """Call visit(value) for each entry of one snapshot, in key order."""
        self._check_open()
        snapshot = self._db.snapshot()
        try:
            for value in snapshot.values():
                visit(value)
        finally:
            del snapshot

    def key_iterator(self, visit: Visitor) -> None:
        """Call visit(key) for each key of one snapshot, in key order."""
        self._check_open()
        snapshot = self._db.snapshot()
        try:
            for key in snapshot.keys():
                visit(key)
        finally:
            del snapshot

    def update(self, execute: Execute) -> None:
        """Run execute against a write batch and commit it atomically.

        If execute raises, the batch is dropped and the exception propagates.
        """
        self._check_open()
        label = self.engine_type.label
        batch = WriteBatch(raw_mode=True)
        try:
            with CallableBucket(put_impl=batch.put, delete_impl=batch.delete) as bucket:
                execute(bucket)
        except BaseException:
            self._metrics.transactions_total.labels(engine=label, status="abort").inc()
            raise
        with self._engine_errors("update"):
            self._db.write(batch)
        self._metrics.transactions_total.labels(engine=label, status="commit").inc()

    def create_partitions(self, *names: bytes | str | None) -> None:
        """No-op: the engine has no partitions."""
        self._check_open()

    def delete_partitions(self, *names: bytes | str | None) -> None:
        """No-op: the engine has no partitions."""
        self._check_open()

    def clean(self) -> None:
        """Delete every key in one atomic batch."""
        self._check_open()
        batch = WriteBatch(raw_mode=True)
        with self._engine_errors("clean"):
            for key in self._db.keys():
                batch.delete(key)
            self._db.write(batch)

    def close(self) -> None:
        """Flush and close the database."""
        if not self._opened:
            return
        self._opened = False
        self._db.close()
        self._metrics.open_stores.labels(engine=self.engine_type.label).dec()
        logger.info("store_closed", engine=self.engine_type.label, path=self._path)

    def __enter__(self) -> LogStructuredStore:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
