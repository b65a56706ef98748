"""Application layer for the key-value drivers.

Exports:
    - open_store: Open a store on an explicitly selected engine
    - open_configured_store: Open the store described by the configuration
"""

from kv_drivers.application.driver import open_configured_store, open_store

__all__ = [
    "open_store",
    "open_configured_store",
]
