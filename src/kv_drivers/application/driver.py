"""Driver facade - the single entry point for opening a store.

Usage:
    from kv_drivers import DEFAULT_OPTIONS, EngineType, open_store

    options = DEFAULT_OPTIONS.add_bucket("users")

    with open_store(EngineType.PAGE_TREE, "/var/lib/app/users.db", options) as store:
        store.upsert(b"alice", b"{...}")
        value = store.get(b"alice")

    # Or let configuration pick the engine (KV_DRIVERS_STORE__ENGINE=...)
    store = open_configured_store()

The set of engines is closed: each EngineType maps to exactly one store
constructor below, and there is no way to register another.
"""

from __future__ import annotations

from typing import Callable

from kv_drivers.adapters.outbound import CacheStore, LogStructuredStore, PageTreeStore
from kv_drivers.domain.value_objects import EngineType, Options
from kv_drivers.infrastructure.config import Config, get_config
from kv_drivers.infrastructure.logging import get_logger
from kv_drivers.infrastructure.metrics import MetricsRegistry
from kv_drivers.infrastructure.tracing import store_span
from kv_drivers.ports.outbound.key_value_store import KeyValueStore

logger = get_logger(__name__)

_StoreFactory = Callable[[str, Options, Config, MetricsRegistry | None], KeyValueStore]


def _open_page_tree(
    path: str, options: Options, config: Config, metrics: MetricsRegistry | None
) -> KeyValueStore:
    return PageTreeStore(path, options, config.page_tree, metrics)


def _open_log_structured(
    path: str, options: Options, config: Config, metrics: MetricsRegistry | None
) -> KeyValueStore:
    return LogStructuredStore(path, options, config.log_structured, metrics)


def _open_memory_cache(
    name: str, options: Options, config: Config, metrics: MetricsRegistry | None
) -> KeyValueStore:
    # The path is only a name for the cache
    return CacheStore(name, options, config.cache, metrics=metrics)


_DRIVERS: dict[EngineType, _StoreFactory] = {
    EngineType.PAGE_TREE: _open_page_tree,
    EngineType.LOG_STRUCTURED: _open_log_structured,
    EngineType.MEMORY_CACHE: _open_memory_cache,
}


def open_store(
    engine: EngineType | int | str,
    path: str,
    options: Options | None = None,
    *,
    config: Config | None = None,
    metrics: MetricsRegistry | None = None,
) -> KeyValueStore:
    """Open a store on the selected engine.

    Args:
        engine: Engine selector (EngineType, its integer value or its name).
        path: Data file (page tree), data directory (log-structured) or
            cache name (memory cache).
        options: Connection options; fields an engine does not use are ignored.
        config: Engine defaults (defaults to get_config()).
        metrics: Metrics registry (defaults to the global one).

    Returns:
        An open store satisfying the KeyValueStore protocol.

    Raises:
        UnknownEngineError: If engine is outside the declared range.
        EmptyPathError: If the log-structured engine is given an empty path.
        OpenFailureError: If the engine fails to initialize.
    """
    engine_type = EngineType.parse(engine)
    options = options or Options()
    config = config or get_config()

    with store_span("open", engine_type.label, path):
        store = _DRIVERS[engine_type](path, options, config, metrics)

    logger.debug("driver_selected", engine=engine_type.label, path=path)
    return store


def open_configured_store(
    config: Config | None = None,
    metrics: MetricsRegistry | None = None,
) -> KeyValueStore:
    """Open the store described by the ``store`` section of the configuration."""
    config = config or get_config()
    selection = config.store
    options = Options(bucket=selection.bucket, size=selection.size, timeout=selection.timeout)
    return open_store(selection.engine, selection.path, options, config=config, metrics=metrics)
