"""Dict-backed entity store.

Entities are held as ``model_dump()`` snapshots keyed by
``(entity_type, id)``; ``get`` rebuilds a fresh model every time, so a
handler that mutates an entity without saving it leaves the store
untouched. One instance lives for one processing run.

Good for: unit tests, replaying a feed file, local development.
"""

from __future__ import annotations

import copy
from typing import Any, TypeVar

from dispute_indexer.core.models import Entity

E = TypeVar("E", bound=Entity)


class InMemoryEntityStore:
    """In-process implementation of ``IEntityStore``."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, str], dict[str, Any]] = {}

    async def get(self, model: type[E], entity_id: str) -> E | None:
        raw = self._records.get((model.entity_type, entity_id))
        if raw is None:
            return None
        return model.model_validate(copy.deepcopy(raw))

    async def save(self, entity: Entity) -> None:
        self._records[(entity.entity_type, entity.id)] = entity.model_dump()

    async def list_all(self, model: type[E]) -> list[E]:
        """Return every stored entity of *model*, in first-insert order."""
        return [
            model.model_validate(copy.deepcopy(raw))
            for (entity_type, _), raw in self._records.items()
            if entity_type == model.entity_type
        ]

    def count(self, model: type[Entity] | None = None) -> int:
        """Number of stored records, optionally for one entity type."""
        if model is None:
            return len(self._records)
        return sum(1 for entity_type, _ in self._records if entity_type == model.entity_type)

    def clear(self) -> None:
        """Drop all records. Testing only."""
        self._records.clear()
