"""SQLAlchemy async engine and session helpers.

Provides a factory for async engines (asyncpg for Postgres, aiosqlite for
local files and tests), an async context manager for scoped sessions, and
schema creation. Engines are owned by the store that created them; there
is no module-level engine.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from .models import Base

logger = logging.getLogger(__name__)


def create_engine(
    url: str,
    *,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_recycle: int = 1800,
    echo: bool = False,
) -> AsyncEngine:
    """Create and return a new SQLAlchemy :class:`AsyncEngine`.

    Args:
        url: Database connection URL, e.g. ``postgresql+asyncpg://...`` or
            ``sqlite+aiosqlite:///indexer.db``.
        pool_size: Persistent connections to keep (server databases only).
        max_overflow: Additional connections beyond *pool_size*.
        pool_recycle: Seconds after which a connection is recycled.
        echo: If ``True``, log all emitted SQL statements.
    """
    pool_kwargs: dict = {}
    if url.startswith("sqlite"):
        if ":memory:" in url:
            # One shared connection, otherwise each session sees an empty db
            pool_kwargs["poolclass"] = StaticPool
            pool_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        pool_kwargs.update(
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_recycle=pool_recycle,
        )

    engine = create_async_engine(url, echo=echo, **pool_kwargs)
    logger.info("Created async engine for %s", url.split("@")[-1])
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create all tables defined in the ORM metadata."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created / verified.")


@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Yield a session committed on success and rolled back on exception."""
    session = factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
