"""Entity store implementations (in-memory and SQL)."""

from .memory_store import InMemoryEntityStore

__all__ = ["InMemoryEntityStore"]
