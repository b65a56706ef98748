"""Value objects for the drivers domain.

Exports:
    - EngineType: Closed selector of the available engines
    - TransactionGuarantee: ATOMIC or BEST_EFFORT_SEQUENTIAL update() semantics
    - Options, DEFAULT_OPTIONS, driver_options: Connection options
    - to_bytes: Key and partition name normalization
"""

from kv_drivers.domain.value_objects.engine_type import EngineType, TransactionGuarantee
from kv_drivers.domain.value_objects.options import (
    DEFAULT_OPTIONS,
    Options,
    driver_options,
    to_bytes,
)

__all__ = [
    "EngineType",
    "TransactionGuarantee",
    "Options",
    "DEFAULT_OPTIONS",
    "driver_options",
    "to_bytes",
]
