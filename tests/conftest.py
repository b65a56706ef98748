"""Pytest configuration and fixtures for kv_drivers tests."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
from prometheus_client import CollectorRegistry

from kv_drivers.infrastructure.config import (
    CacheConfig,
    Config,
    PageTreeConfig,
    StoreConfig,
)
from kv_drivers.infrastructure.metrics import MetricsRegistry


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> Config:
    """Provide a test configuration with a temporary data path."""
    return Config(
        store=StoreConfig(path=str(temp_dir / "kv.db")),
        page_tree=PageTreeConfig(
            map_size=16777216,  # 16MB for tests
            sync=False,  # Faster for tests
        ),
        cache=CacheConfig(
            max_cost=1048576,
            poll_interval_seconds=0.001,
            visibility_timeout_seconds=0.5,
        ),
    )


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
