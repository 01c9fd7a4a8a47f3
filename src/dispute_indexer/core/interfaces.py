"""Protocol interfaces for the indexer's collaborators.

Handlers depend only on these Protocols. Stores, the content resolver and
the naming oracle are injected, so tests and the CLI swap implementations
without touching the projection code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, TypeVar, runtime_checkable

from .models import Entity

E = TypeVar("E", bound=Entity)


# ---------------------------------------------------------------------------
# Entity store
# ---------------------------------------------------------------------------

@runtime_checkable
class IEntityStore(Protocol):
    """Keyed get/save over entity documents.

    ``get`` returns a detached copy; changes only persist through ``save``.
    ``save`` inserts or replaces by ``(entity_type, id)``.
    """

    async def get(self, model: type[E], entity_id: str) -> E | None: ...

    async def save(self, entity: Entity) -> None: ...

    async def list_all(self, model: type[E]) -> list[E]: ...


# ---------------------------------------------------------------------------
# Content-addressed store
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ResolvedContent:
    """Best-effort enrichment for a URI. Either field may be absent."""

    data: bytes | None = None
    declared_type: str | None = None


@runtime_checkable
class IContentResolver(Protocol):
    async def resolve(self, uri: str) -> ResolvedContent: ...


# ---------------------------------------------------------------------------
# Naming oracle
# ---------------------------------------------------------------------------

@runtime_checkable
class INameOracle(Protocol):
    """Read-only contract call returning a jurisdiction's display name.

    Raises ``ExternalCallError`` on any failure.
    """

    async def name(self, address: str) -> str: ...
