"""Integration tests running the shared store contract on every engine."""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

from kv_drivers import (
    EngineType,
    KeyNotFoundError,
    KeyValueStore,
    Options,
    TransactionBucket,
    UnknownEngineError,
    open_configured_store,
    open_store,
)
from kv_drivers.adapters.outbound import CacheStore, LogStructuredStore, PageTreeStore
from kv_drivers.infrastructure.config import Config, StoreConfig
from kv_drivers.infrastructure.metrics import MetricsRegistry


@pytest.mark.integration
class TestStoreContract:
    """The same behavior through open_store, whichever engine backs it."""

    @pytest.fixture(params=list(EngineType), ids=lambda engine: engine.label)
    def store(
        self,
        request: pytest.FixtureRequest,
        temp_dir: Path,
        test_config: Config,
        metrics_registry: MetricsRegistry,
    ) -> Generator[KeyValueStore, None, None]:
        """Open a store on each engine with the partition ``tbucket``."""
        s = open_store(
            request.param,
            str(temp_dir / "contract"),
            Options(bucket=b"tbucket"),
            config=test_config,
            metrics=metrics_registry,
        )
        yield s
        s.close()

    def test_satisfies_protocol(self, store: KeyValueStore) -> None:
        assert isinstance(store, KeyValueStore)

    def test_read_after_write(self, store: KeyValueStore) -> None:
        store.upsert(b"user:1", b"alice")
        assert store.get(b"user:1") == b"alice"

        store.upsert(b"user:1", b"bob")
        assert store.get(b"user:1") == b"bob"

    def test_delete_then_get(self, store: KeyValueStore) -> None:
        store.upsert(b"k", b"v")
        store.delete(b"k")

        with pytest.raises(KeyNotFoundError):
            store.get(b"k")

    def test_n_distinct_inserts(self, store: KeyValueStore) -> None:
        """key_iterator yields every key; length() agrees where implemented."""
        n = 25
        for i in range(n):
            store.upsert(f"key-{i:03d}".encode(), f"value-{i}".encode())

        keys: list[bytes] = []
        store.key_iterator(keys.append)
        values: list[bytes] = []
        store.for_each(values.append)

        assert len(set(keys)) == n
        assert len(values) == n
        if store.engine_type is not EngineType.LOG_STRUCTURED:
            assert store.length() == n

    def test_failing_visitor(self, store: KeyValueStore) -> None:
        store.upsert(b"a", b"1")
        store.upsert(b"b", b"2")

        class VisitorFailure(Exception):
            pass

        def visit(item: bytes) -> None:
            raise VisitorFailure(item)

        with pytest.raises(VisitorFailure):
            store.for_each(visit)
        with pytest.raises(VisitorFailure):
            store.key_iterator(visit)

    def test_update(self, store: KeyValueStore) -> None:
        store.upsert(b"from", b"x")

        def rename(bucket: TransactionBucket) -> None:
            bucket.put(b"to", b"x")
            bucket.delete(b"from")

        store.update(rename)

        assert store.get(b"to") == b"x"
        with pytest.raises(KeyNotFoundError):
            store.get(b"from")

    def test_clean(self, store: KeyValueStore) -> None:
        store.upsert(b"a", b"1")
        store.clean()

        with pytest.raises(KeyNotFoundError):
            store.get(b"a")

    def test_context_manager_closes(self, store: KeyValueStore) -> None:
        with store:
            store.upsert(b"k", b"v")
        assert not store.is_open


@pytest.mark.integration
class TestOpenStore:
    """Tests for the driver facade."""

    def test_dispatch(
        self, temp_dir: Path, test_config: Config, metrics_registry: MetricsRegistry
    ) -> None:
        """Each selector maps to its own adapter."""
        expected = {
            EngineType.PAGE_TREE: PageTreeStore,
            EngineType.LOG_STRUCTURED: LogStructuredStore,
            EngineType.MEMORY_CACHE: CacheStore,
        }
        for engine, store_class in expected.items():
            path = str(temp_dir / engine.label)
            with open_store(int(engine), path, config=test_config, metrics=metrics_registry) as store:
                assert isinstance(store, store_class)
                assert store.engine_type is engine

    @pytest.mark.parametrize("engine", [99, -1, "btree"])
    def test_unknown_engine(
        self, engine: object, temp_dir: Path, test_config: Config, metrics_registry: MetricsRegistry
    ) -> None:
        """No store is built for an undeclared selector."""
        with pytest.raises(UnknownEngineError):
            open_store(
                engine,  # type: ignore[arg-type]
                str(temp_dir / "x"),
                config=test_config,
                metrics=metrics_registry,
            )

        assert not (temp_dir / "x").exists()

    def test_open_configured_store(
        self, temp_dir: Path, test_config: Config, metrics_registry: MetricsRegistry
    ) -> None:
        """The store section picks the engine, path and initial partition."""
        config = test_config.model_copy(
            update={
                "store": StoreConfig(
                    engine="page_tree", path=str(temp_dir / "configured.db"), bucket="users"
                )
            }
        )

        with open_configured_store(config, metrics=metrics_registry) as store:
            assert store.engine_type is EngineType.PAGE_TREE
            assert store.active_partition == b"users"

    def test_open_configured_cache(self, test_config: Config, metrics_registry: MetricsRegistry) -> None:
        config = test_config.model_copy(
            update={"store": StoreConfig(engine="memory_cache", path="sessions", timeout=0.2)}
        )

        with open_configured_store(config, metrics=metrics_registry) as store:
            assert store.engine_type is EngineType.MEMORY_CACHE
            assert store.path == "sessions"
            store.upsert(b"s", b"1")
            assert store.get(b"s") == b"1"


@pytest.mark.integration
class TestScenarios:
    """End-to-end scenarios on individual engines."""

    def test_page_tree_bucket(
        self, temp_dir: Path, test_config: Config, metrics_registry: MetricsRegistry
    ) -> None:
        """One insert into ``tbucket`` gives one key and a non-empty file."""
        with open_store(
            EngineType.PAGE_TREE,
            str(temp_dir / "scenario.db"),
            Options(bucket="tbucket"),
            config=test_config,
            metrics=metrics_registry,
        ) as store:
            store.upsert(b"k", b"v")

            assert store.length() == 1
            assert store.size() > 0

    def test_log_structured_lifecycle(
        self, temp_dir: Path, test_config: Config, metrics_registry: MetricsRegistry
    ) -> None:
        with open_store(
            "log_structured",
            str(temp_dir / "lsm"),
            config=test_config,
            metrics=metrics_registry,
        ) as store:
            store.upsert(b"k", b"v")
            assert store.get(b"k") == b"v"
            store.delete(b"k")
            with pytest.raises(KeyNotFoundError):
                store.get(b"k")

    def test_cache_key_listed_until_deleted(
        self, test_config: Config, metrics_registry: MetricsRegistry
    ) -> None:
        """After upsert returns, iteration includes the key until delete completes."""
        with open_store(
            EngineType.MEMORY_CACHE, "listing", config=test_config, metrics=metrics_registry
        ) as store:
            store.upsert(b"k", b"v")
            for _ in range(3):
                keys: list[bytes] = []
                store.key_iterator(keys.append)
                assert b"k" in keys

            store.delete(b"k")
            keys = []
            store.key_iterator(keys.append)
            assert b"k" not in keys
