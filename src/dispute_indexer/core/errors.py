"""Custom exception hierarchy for the indexer.

Only fatal conditions are exceptions. A missing aggregate, a missing
referenced entity, an unreachable content store and malformed content are
expected outcomes handled by guard clauses and result variants.
"""


class IndexerError(Exception):
    """Base exception for all indexer errors."""


# --- Configuration ---
class ConfigError(IndexerError):
    """Invalid or missing configuration."""


# --- Input ---
class EventDecodeError(IndexerError):
    """An input record could not be decoded into a known event."""

    def __init__(self, line: int | None, reason: str):
        self.line = line
        self.reason = reason
        where = f"line {line}: " if line is not None else ""
        super().__init__(f"Cannot decode event ({where}{reason})")


# --- External collaborators ---
class ExternalCallError(IndexerError):
    """A contract call failed. Fatal for the triggering event."""

    def __init__(self, address: str, method: str, reason: str):
        self.address = address
        self.method = method
        self.reason = reason
        super().__init__(f"Call {method}() on {address} failed: {reason}")


# --- Storage ---
class StoreError(IndexerError):
    """Entity store unavailable or misused."""
