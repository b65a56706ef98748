"""Unit tests for engine selectors and connection options."""

from __future__ import annotations

import dataclasses

import pytest

from kv_drivers.domain.errors import StorageError, UnknownEngineError
from kv_drivers.domain.value_objects import (
    DEFAULT_OPTIONS,
    EngineType,
    Options,
    TransactionGuarantee,
    driver_options,
    to_bytes,
)


@pytest.mark.unit
class TestEngineType:
    """Tests for EngineType."""

    def test_stable_values(self) -> None:
        """Integer values are part of the public contract."""
        assert EngineType.PAGE_TREE == 0
        assert EngineType.LOG_STRUCTURED == 1
        assert EngineType.MEMORY_CACHE == 2

    def test_parse_member(self) -> None:
        """Members parse to themselves."""
        assert EngineType.parse(EngineType.MEMORY_CACHE) is EngineType.MEMORY_CACHE

    def test_parse_int(self) -> None:
        """Declared integers parse to their member."""
        assert EngineType.parse(1) is EngineType.LOG_STRUCTURED

    def test_parse_name(self) -> None:
        """Names parse case-insensitively."""
        assert EngineType.parse("page_tree") is EngineType.PAGE_TREE
        assert EngineType.parse(" Memory_Cache ") is EngineType.MEMORY_CACHE

    @pytest.mark.parametrize("value", [-1, 3, 99])
    def test_parse_out_of_range(self, value: int) -> None:
        """Out-of-range selectors are rejected, not clamped."""
        with pytest.raises(UnknownEngineError) as exc_info:
            EngineType.parse(value)

        assert exc_info.value.value == value
        assert "inexistent database type" in str(exc_info.value)

    @pytest.mark.parametrize("value", ["btree", "", True, 1.0, None])
    def test_parse_invalid(self, value: object) -> None:
        """Unknown names and non-integer values are rejected."""
        with pytest.raises(UnknownEngineError):
            EngineType.parse(value)  # type: ignore[arg-type]

    def test_unknown_engine_is_value_error(self) -> None:
        """UnknownEngineError can be caught as ValueError or StorageError."""
        error = UnknownEngineError(7)
        assert isinstance(error, ValueError)
        assert isinstance(error, StorageError)

    def test_label(self) -> None:
        """Labels are the lower-case member names."""
        assert EngineType.LOG_STRUCTURED.label == "log_structured"


@pytest.mark.unit
class TestTransactionGuarantee:
    """Tests for TransactionGuarantee."""

    def test_is_atomic(self) -> None:
        assert TransactionGuarantee.ATOMIC.is_atomic
        assert not TransactionGuarantee.BEST_EFFORT_SEQUENTIAL.is_atomic


@pytest.mark.unit
class TestOptions:
    """Tests for Options."""

    def test_defaults(self) -> None:
        """Empty options leave every field to the engine."""
        options = driver_options()

        assert options.bucket is None
        assert options.size == 0
        assert options.timeout == 0.0

    def test_default_options_bucket(self) -> None:
        """The default options carry the conventional bucket."""
        assert DEFAULT_OPTIONS.bucket == b"rhz"

    def test_str_bucket_is_encoded(self) -> None:
        """A str bucket is stored as UTF-8 bytes."""
        assert Options(bucket="tbucket").bucket == b"tbucket"

    def test_add_bucket(self) -> None:
        """add_bucket returns options with the initial partition set."""
        options = driver_options().add_bucket("users")

        assert options.bucket == b"users"

    def test_add_bucket_leaves_default_untouched(self) -> None:
        """Deriving options from DEFAULT_OPTIONS never changes the default."""
        tenant = DEFAULT_OPTIONS.add_bucket("tenant-a")

        assert tenant.bucket == b"tenant-a"
        assert DEFAULT_OPTIONS.bucket == b"rhz"
        assert Options(size=4096).add_bucket(b"b").size == 4096

    def test_options_are_immutable(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_OPTIONS.bucket = b"other"  # type: ignore[misc]

    def test_negative_size(self) -> None:
        with pytest.raises(ValueError, match="size must be >= 0"):
            Options(size=-1)

    def test_negative_timeout(self) -> None:
        with pytest.raises(ValueError, match="timeout must be >= 0"):
            Options(timeout=-0.5)


@pytest.mark.unit
class TestToBytes:
    """Tests for to_bytes."""

    def test_conversions(self) -> None:
        assert to_bytes(None) == b""
        assert to_bytes("é") == "é".encode("utf-8")
        assert to_bytes(b"raw") == b"raw"
        assert to_bytes(bytearray(b"buf")) == b"buf"
