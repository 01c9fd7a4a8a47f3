"""Application bootstrap.

Wires settings, logging, the entity store and the external collaborators
into an :class:`EventRouter`, then feeds it a decoded event file.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from .chain.name_oracle import JsonRpcNameOracle
from .content.resolver import ContentResolver
from .core.config import Settings, load_settings
from .core.enums import StorageBackend
from .core.events import read_events
from .core.interfaces import IEntityStore
from .core.models import ENTITY_MODELS, Entity
from .observability.logger import setup_logging
from .projection.context import IndexerContext
from .projection.router import EventRouter
from .storage.memory_store import InMemoryEntityStore
from .storage.sql.store import SqlEntityStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def open_store(settings: Settings) -> AsyncIterator[IEntityStore]:
    """Yield the configured entity store for the duration of a run."""
    if settings.storage.backend == StorageBackend.MEMORY:
        yield InMemoryEntityStore()
        return

    store = SqlEntityStore(settings.storage.database_url, echo=settings.storage.echo)
    await store.connect(create_tables=settings.storage.create_tables)
    try:
        yield store
    finally:
        await store.close()


@asynccontextmanager
async def open_router(settings: Settings) -> AsyncIterator[EventRouter]:
    """Yield a router whose collaborators are open for the run."""
    async with (
        open_store(settings) as store,
        ContentResolver(
            settings.content.gateway_url,
            timeout=settings.content.timeout_seconds,
        ) as resolver,
        JsonRpcNameOracle(
            settings.chain.rpc_url,
            timeout=settings.chain.timeout_seconds,
            block_tag=settings.chain.block_tag,
        ) as oracle,
    ):
        yield EventRouter(IndexerContext(store=store, resolver=resolver, oracle=oracle))


async def run(
    events_path: str | Path,
    config_path: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> dict[str, int]:
    """Replay a JSONL event file. Returns the router's counters."""

    # 1. Load settings
    settings = load_settings(config_path=config_path, overrides=overrides)
    settings.validate_storage()

    # 2. Set up logging
    setup_logging(settings.observability.log_level, settings.observability.log_format)
    logger.info(
        "Starting replay of %s (storage=%s)", events_path, settings.storage.backend.value,
    )

    # 3. Wire and dispatch
    async with open_router(settings) as router:
        await router.dispatch_many(read_events(events_path))
        stats = router.stats()

    logger.info("Replay complete: %s", stats)
    return stats


async def show(
    entity_type: str,
    entity_id: str,
    config_path: str | None = None,
    overrides: dict[str, Any] | None = None,
) -> Entity | None:
    """Load one entity from the configured persistent store."""
    from .core.errors import ConfigError

    settings = load_settings(config_path=config_path, overrides=overrides)
    settings.validate_storage()
    if settings.storage.backend != StorageBackend.SQL:
        raise ConfigError("show requires the sql storage backend.")

    model = ENTITY_MODELS.get(entity_type)
    if model is None:
        raise ConfigError(
            f"Unknown entity type {entity_type!r}; expected one of "
            f"{', '.join(sorted(ENTITY_MODELS))}."
        )
    async with open_store(settings) as store:
        return await store.get(model, entity_id)
