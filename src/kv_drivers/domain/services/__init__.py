"""Domain services for bridging engine consistency models."""

from kv_drivers.domain.services.key_index import KeyIndex
from kv_drivers.domain.services.visibility_waiter import ValueProbe, VisibilityWaiter

__all__ = [
    "KeyIndex",
    "VisibilityWaiter",
    "ValueProbe",
]
