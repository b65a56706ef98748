"""Adapters layer - engine-specific implementations of the ports."""
