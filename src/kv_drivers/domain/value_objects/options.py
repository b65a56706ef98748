"""Connection options shared by every driver."""

from __future__ import annotations

from dataclasses import dataclass, replace


def to_bytes(name: bytes | str | None) -> bytes:
    """Normalize a key or partition name to bytes; None becomes b""."""
    if name is None:
        return b""
    if isinstance(name, str):
        return name.encode("utf-8")
    return bytes(name)


@dataclass(frozen=True)
class Options:
    """Options recognized by the drivers.

    Options are immutable, so a shared instance such as DEFAULT_OPTIONS can
    be handed to any number of stores. Fields an engine has no use for are
    ignored by it.

    Attributes:
        bucket: Initial partition. Only the page-tree engine uses it.
        size: Soft capacity hint. Page tree: map size in bytes.
            Memory cache: maximum total cost. 0 means the configured default.
        timeout: Seconds. Memory cache: bound on a visibility wait.
            0 means the configured default.
    """

    bucket: bytes | None = None
    size: int = 0
    timeout: float = 0.0

    def __post_init__(self) -> None:
        if isinstance(self.bucket, str):
            object.__setattr__(self, "bucket", self.bucket.encode("utf-8"))
        if self.size < 0:
            raise ValueError(f"size must be >= 0, got {self.size}")
        if self.timeout < 0:
            raise ValueError(f"timeout must be >= 0, got {self.timeout}")

    def add_bucket(self, bucket: bytes | str) -> Options:
        """Return a copy of these options with the initial partition set."""
        return replace(self, bucket=to_bytes(bucket))


# Options for a database with the conventional default bucket
DEFAULT_OPTIONS = Options(bucket=b"rhz")


def driver_options() -> Options:
    """Return an empty set of options."""
    return Options()
