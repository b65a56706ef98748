"""Error taxonomy shared by every store.

Each failure kind is its own exception class so callers can tell them apart
with ``except`` clauses instead of inspecting messages. All of them derive
from StorageError.

Errors raised by a traversal visitor are not part of this hierarchy: they
propagate to the caller unchanged.
"""

from __future__ import annotations


class StorageError(Exception):
    """Base class for every driver error."""

    pass


class EmptyPathError(StorageError, ValueError):
    """A disk engine that requires a location was given an empty path."""

    pass


class UnknownEngineError(StorageError, ValueError):
    """The engine selector lies outside the declared range."""

    def __init__(self, value: object) -> None:
        super().__init__(f"inexistent database type: {value!r}")
        self.value = value


class OpenFailureError(StorageError):
    """The underlying engine failed to initialize.

    The engine's own exception is chained as ``__cause__``.
    """

    pass


class KeyNotFoundError(StorageError, KeyError):
    """get() was called for a key that is not present."""

    def __init__(self, key: bytes) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"key not found: {self.key!r}"


class PartitionNotFoundError(StorageError):
    """A named partition does not exist, or no partition is active."""

    def __init__(self, name: bytes | None) -> None:
        if name is None:
            message = "no active partition"
        else:
            message = f"partition not found: {name!r}"
        super().__init__(message)
        self.name = name


class AdmissionRejectedError(StorageError):
    """The cache admission policy declined a write."""

    def __init__(self, key: bytes, cost: int) -> None:
        super().__init__(f"cache refused key {key!r} with cost {cost}")
        self.key = key
        self.cost = cost


class VisibilityTimeoutError(StorageError):
    """A cache write or delete did not become visible within its bound."""

    def __init__(self, key: bytes, expected_present: bool, waited: float) -> None:
        state = "visible" if expected_present else "absent"
        super().__init__(f"key {key!r} did not become {state} after {waited:.3f}s")
        self.key = key
        self.expected_present = expected_present
        self.waited = waited


class StoreClosedError(StorageError):
    """An operation was attempted on a closed store."""

    pass


class EngineError(StorageError):
    """An engine operation failed; the engine's exception is chained."""

    pass


class TransactionClosedError(StorageError):
    """A transaction bucket was used after its update() call returned."""

    pass
