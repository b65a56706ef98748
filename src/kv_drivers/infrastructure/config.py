"""Configuration management for the key-value drivers."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreConfig(BaseModel):
    """Store selection, used by open_configured_store()."""

    engine: Literal["page_tree", "log_structured", "memory_cache"] = Field(
        default="page_tree", description="Engine backing the store"
    )
    path: str = Field(default="data/kv.db", description="Data file, directory or cache name")
    bucket: str | None = Field(default="rhz", description="Initial partition (page tree only)")
    size: int = Field(default=0, ge=0, description="Soft capacity hint, 0 for engine default")
    timeout: float = Field(default=0.0, ge=0, description="Cache visibility bound in seconds")


class PageTreeConfig(BaseModel):
    """LMDB page-tree engine configuration."""

    map_size: int = Field(
        default=268435456, ge=1048576, description="Maximum map size in bytes (default 256MB)"
    )
    max_partitions: int = Field(default=128, ge=1, le=32767, description="Named database slots")
    sync: bool = Field(default=True, description="Flush buffers to disk on commit")


class LogStructuredConfig(BaseModel):
    """RocksDB log-structured engine configuration."""

    create_if_missing: bool = Field(default=True, description="Create the database directory")


class CacheConfig(BaseModel):
    """In-memory cache engine configuration."""

    max_cost: int = Field(default=1000000, ge=1, description="Total cost the cache may hold")
    poll_interval_seconds: float = Field(
        default=0.02, gt=0, description="Visibility wait polling interval"
    )
    visibility_timeout_seconds: float = Field(
        default=5.0, gt=0, description="Upper bound on a single visibility wait"
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    metrics_port: int = Field(default=8001, ge=1, le=65535, description="Prometheus metrics port")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="kv_drivers", description="Service name for tracing")


class Config(BaseSettings):
    """Main configuration for the key-value drivers."""

    model_config = SettingsConfigDict(
        env_prefix="KV_DRIVERS_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    store: StoreConfig = Field(default_factory=StoreConfig)
    page_tree: PageTreeConfig = Field(default_factory=PageTreeConfig)
    log_structured: LogStructuredConfig = Field(default_factory=LogStructuredConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
