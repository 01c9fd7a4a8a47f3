"""SQL-backed entity store.

Implements ``IEntityStore`` over the ``entities`` table. Entities are
stored as their pydantic JSON document; ``save`` is an upsert through
``session.merge`` keyed by ``(entity_type, entity_id)``.
"""

from __future__ import annotations

import json
import logging
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from dispute_indexer.core.errors import StoreError
from dispute_indexer.core.models import Entity

from .connection import create_all, create_engine, create_session_factory, session_scope
from .models import EntityRecord

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Entity)


class SqlEntityStore:
    """Async SQLAlchemy implementation of ``IEntityStore``.

    Args:
        database_url: SQLAlchemy async URL.
        echo: Log emitted SQL.
    """

    def __init__(self, database_url: str, *, echo: bool = False) -> None:
        self._url = database_url
        self._echo = echo
        self._engine: AsyncEngine | None = None
        self._factory: async_sessionmaker[AsyncSession] | None = None

    # -- lifecycle -----------------------------------------------------------

    async def connect(self, *, create_tables: bool = False) -> None:
        """Create the engine; optionally create the schema."""
        if self._engine is not None:
            return
        self._engine = create_engine(self._url, echo=self._echo)
        self._factory = create_session_factory(self._engine)
        if create_tables:
            await create_all(self._engine)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._factory = None
            logger.info("Engine disposed.")

    async def __aenter__(self) -> SqlEntityStore:
        await self.connect(create_tables=True)
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._factory is None:
            raise StoreError("SqlEntityStore not connected. Call connect() first.")
        return self._factory

    # -- IEntityStore --------------------------------------------------------

    async def get(self, model: type[E], entity_id: str) -> E | None:
        async with session_scope(self.session_factory) as session:
            record = await session.get(EntityRecord, (model.entity_type, entity_id))
            if record is None:
                return None
            return model.model_validate_json(_dump(record.data))

    async def save(self, entity: Entity) -> None:
        record = EntityRecord(
            entity_type=entity.entity_type,
            entity_id=entity.id,
            data=entity.model_dump(mode="json"),
        )
        async with session_scope(self.session_factory) as session:
            await session.merge(record)

    async def list_all(self, model: type[E]) -> list[E]:
        stmt = (
            select(EntityRecord)
            .where(EntityRecord.entity_type == model.entity_type)
            .order_by(EntityRecord.entity_id)
        )
        async with session_scope(self.session_factory) as session:
            result = await session.execute(stmt)
            return [
                model.model_validate_json(_dump(record.data))
                for record in result.scalars().all()
            ]


def _dump(data: dict) -> str:
    # JSON mode validation decodes the base64 bytes fields
    return json.dumps(data)
