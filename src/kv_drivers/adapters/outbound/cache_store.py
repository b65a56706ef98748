"""Memory cache store.

This adapter implements the KeyValueStore protocol over a CacheEngine, an
in-memory engine with cost-based admission, internal eviction, asynchronous
application of writes and no key enumeration.

Two domain services turn it into a synchronous, enumerable store:

- KeyIndex records the keys this store has written, so key_iterator() and
  for_each() have something to walk.
- VisibilityWaiter blocks upsert() and delete() until the engine actually
  shows the new state, so callers get read-after-write semantics.

Key lifecycle:

    ABSENT ──upsert() admitted──> PENDING ──engine applies──> VISIBLE
       ^                                                         │
       └──────── engine applies ──── PENDING_REMOVAL <──delete()─┘

upsert() and delete() return only once the transition has completed, or
raise VisibilityTimeoutError when it does not complete within the bound.

Differences from the disk stores:
    - update() is not atomic. Each put/delete is applied at once and there is
      no rollback (TransactionGuarantee.BEST_EFFORT_SEQUENTIAL).
    - Traversals are not snapshots. for_each() point-reads each key from a
      copy of the index, so a key the engine evicted on its own raises
      KeyNotFoundError and aborts the traversal.
    - Partitions do not exist; the partition methods do nothing.

Thread Safety:
    All operations are thread-safe. The index lock is never held while
    waiting for visibility or while a traversal runs.
"""

from __future__ import annotations

from kv_drivers.adapters.outbound.lfu_cache_engine import LFUCacheEngine
from kv_drivers.domain.errors import AdmissionRejectedError, KeyNotFoundError, StoreClosedError
from kv_drivers.domain.services import KeyIndex, VisibilityWaiter
from kv_drivers.domain.value_objects import EngineType, Options, TransactionGuarantee
from kv_drivers.infrastructure.config import CacheConfig
from kv_drivers.infrastructure.logging import get_logger
from kv_drivers.infrastructure.metrics import MetricsRegistry, get_metrics
from kv_drivers.ports.outbound.cache_engine import CacheEngine
from kv_drivers.ports.outbound.key_value_store import Visitor
from kv_drivers.ports.outbound.transaction import CallableBucket, Execute

logger = get_logger(__name__)


class CacheStore:
    """KeyValueStore over an in-memory, eventually consistent cache.

    Attributes:
        path: Logical cache name (no filesystem meaning).
    """

    def __init__(
        self,
        name: str,
        options: Options | None = None,
        config: CacheConfig | None = None,
        engine: CacheEngine | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Open the cache.

        Args:
            name: Logical name of the cache.
            options: size overrides the maximum cost, timeout the visibility bound.
            config: Cache configuration (defaults to CacheConfig()).
            engine: Engine to wrap; an LFUCacheEngine is built when omitted.
            metrics: Metrics registry (defaults to the global one).
        """
        options = options or Options()
        config = config or CacheConfig()

        self._name = name
        self._metrics = metrics or get_metrics()
        self._engine: CacheEngine = engine or LFUCacheEngine(options.size or config.max_cost)
        self._index = KeyIndex()
        self._waiter = VisibilityWaiter(
            probe=self._engine.get,
            poll_interval=config.poll_interval_seconds,
            timeout=options.timeout or config.visibility_timeout_seconds,
            metrics=self._metrics,
        )
        self._opened = True

        self._metrics.open_stores.labels(engine=self.engine_type.label).inc()
        logger.info(
            "store_opened",
            engine=self.engine_type.label,
            path=name,
            max_cost=self._engine.max_cost,
            visibility_timeout=self._waiter.timeout,
        )

    @property
    def engine_type(self) -> EngineType:
        return EngineType.MEMORY_CACHE

    @property
    def path(self) -> str:
        return self._name

    @property
    def is_open(self) -> bool:
        return self._opened

    @property
    def transaction_guarantee(self) -> TransactionGuarantee:
        return TransactionGuarantee.BEST_EFFORT_SEQUENTIAL

    @property
    def active_partition(self) -> bytes | None:
        return None

    def _check_open(self) -> None:
        if not self._opened:
            raise StoreClosedError(f"cache {self._name!r} is closed")

    def size(self) -> int:
        """Return the total cost held by the engine (value bytes)."""
        self._check_open()
        return self._engine.cost

    def length(self) -> int:
        """Return the number of keys in the index."""
        self._check_open()
        return len(self._index)

    def get(self, key: bytes) -> bytes:
        self._check_open()
        with self._metrics.track(self.engine_type.label, "get"):
            value = self._engine.get(key)
            if value is None:
                raise KeyNotFoundError(key)
            return value

    def upsert(self, key: bytes, value: bytes) -> None:
        """Write key and block until the engine shows this value for it.

        Overwriting a key waits until the previous value is replaced, so a
        get() right after returns the new value.

        Raises:
            AdmissionRejectedError: If the engine refuses the entry.
            VisibilityTimeoutError: If the entry does not become visible in time.
        """
        self._check_open()
        cost = len(value)
        with self._metrics.track(self.engine_type.label, "upsert"):
            if not self._engine.set(key, value, cost):
                self._metrics.admission_rejections_total.inc()
                logger.warning("admission_rejected", path=self._name, key=key.hex(), cost=cost)
                raise AdmissionRejectedError(key, cost)
            self._index.add(key)
            self._waiter.wait(key, present=True, value=value)

    def delete(self, key: bytes) -> None:
        """Remove key and block until the engine no longer shows it.

        Raises:
            VisibilityTimeoutError: If the entry is still visible after the bound.
        """
        self._check_open()
        with self._metrics.track(self.engine_type.label, "delete"):
            self._index.discard(key)
            self._engine.delete(key)
            self._waiter.wait(key, present=False)

    def for_each(self, visit: Visitor) -> None:
        """Point-read every indexed key and call visit(value).

        Raises:
            KeyNotFoundError: If an indexed key was evicted by the engine.
        """
        self._check_open()
        for key in self._index.snapshot():
            visit(self.get(key))

    def key_iterator(self, visit: Visitor) -> None:
        """Call visit(key) for every indexed key."""
        self._check_open()
        for key in self._index.snapshot():
            visit(key)

    def update(self, execute: Execute) -> None:
        """Run execute with a bucket whose writes apply immediately.

        Writes made before execute raises stay applied.
        """
        self._check_open()
        try:
            with CallableBucket(put_impl=self.upsert, delete_impl=self.delete) as bucket:
                execute(bucket)
        except BaseException:
            self._metrics.transactions_total.labels(
                engine=self.engine_type.label, status="abort"
            ).inc()
            raise
        self._metrics.transactions_total.labels(engine=self.engine_type.label, status="commit").inc()

    def create_partitions(self, *names: bytes | str) -> None:
        """No-op: the cache has no partitions."""
        self._check_open()

    def delete_partitions(self, *names: bytes | str) -> None:
        """No-op: the cache has no partitions."""
        self._check_open()

    def clean(self) -> None:
        """Drop every entry from the engine and the index."""
        self._check_open()
        self._engine.clear()
        self._index.clear()

    def close(self) -> None:
        """Release the engine and mark the cache closed."""
        if not self._opened:
            return
        self._opened = False
        self._engine.close()
        self._index.clear()
        self._metrics.open_stores.labels(engine=self.engine_type.label).dec()
        logger.info("store_closed", engine=self.engine_type.label, path=self._name)

    def __enter__(self) -> CacheStore:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
