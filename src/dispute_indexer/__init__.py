"""Materialized case and jurisdiction state from dispute-protocol events."""

__version__ = "0.1.0"
