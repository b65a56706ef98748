"""Engine selector and transaction guarantee tiers.

The set of engines is closed. Selectors are validated against the declared
range and an out-of-range value is rejected, never clamped to a default.
"""

from __future__ import annotations

from enum import Enum, IntEnum, auto

from kv_drivers.domain.errors import UnknownEngineError


class EngineType(IntEnum):
    """Available storage engines.

    The integer values are stable and may be stored in configuration.
    """

    PAGE_TREE = 0
    """Ordered, transactional B+tree of pages with named partitions (LMDB)."""

    LOG_STRUCTURED = 1
    """Transactional log-structured merge tree without partitions (RocksDB)."""

    MEMORY_CACHE = 2
    """In-memory cost-bounded cache with admission control."""

    @classmethod
    def parse(cls, value: EngineType | int | str) -> EngineType:
        """Validate a selector given as a member, an int, or a member name.

        Args:
            value: The selector, e.g. ``EngineType.PAGE_TREE``, ``0`` or ``"page_tree"``.

        Returns:
            The matching EngineType.

        Raises:
            UnknownEngineError: If the value does not name a declared engine.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise UnknownEngineError(value) from None
        if isinstance(value, bool) or not isinstance(value, int):
            raise UnknownEngineError(value)
        if not cls.PAGE_TREE <= value <= cls.MEMORY_CACHE:
            raise UnknownEngineError(value)
        return cls(value)

    @property
    def label(self) -> str:
        """Lower-case name used in logs and metric labels."""
        return self.name.lower()


class TransactionGuarantee(Enum):
    """What update() promises about a group of writes."""

    ATOMIC = auto()
    """All writes in one update() become visible together or not at all."""

    BEST_EFFORT_SEQUENTIAL = auto()
    """Each write is applied on its own as it is issued; no rollback."""

    @property
    def is_atomic(self) -> bool:
        return self is TransactionGuarantee.ATOMIC
