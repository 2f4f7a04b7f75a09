"""Database engine and sessions for the antifraud schema.

Request handlers get one session per request from ``get_session``; it
commits when the handler returns and holds any ``FOR UPDATE`` row locks
until then. The risk engine's registry and history lookups run
concurrently, and an ``AsyncSession`` cannot be shared between concurrent
operations, so each lookup opens its own read-only ``lookup_session``.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)
from sqlalchemy.ext.asyncio import (
    create_async_engine as sqlalchemy_create_async_engine,
)

from antifraud.core.config import DatabaseConfig

logger = logging.getLogger(__name__)

READ_ONLY_TRANSACTION = text("SET TRANSACTION READ ONLY")

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def create_async_engine(config: DatabaseConfig) -> AsyncEngine:
    """Create async database engine."""
    engine = sqlalchemy_create_async_engine(
        config.async_url,
        echo=config.echo,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout,
        pool_recycle=config.pool_recycle,
        pool_pre_ping=True,
        connect_args={
            "server_settings": {"timezone": "UTC"},
            "timeout": 30,
        },
    )
    logger.info(
        "Database engine created",
        extra={
            "host": config.host,
            "port": config.port,
            "database": config.name,
        },
    )
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create async session factory."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_engine() -> AsyncEngine:
    """Get or create the global database engine."""
    global _engine
    if _engine is None:
        from antifraud.core.config import get_settings

        _engine = create_async_engine(get_settings().database)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the global session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
    return _session_factory


async def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


async def get_session() -> AsyncGenerator[AsyncSession]:
    """Request-scoped session: commit on success, roll back on error."""
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception as exc:
            await session.rollback()
            logger.info("Request session rolled back", extra={"error": type(exc).__name__})
            raise


@asynccontextmanager
async def lookup_session(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncIterator[AsyncSession]:
    """Short-lived read-only session for a single engine lookup.

    It never shares a connection with the request session, so lookups
    neither see nor block the request's uncommitted writes.
    """
    factory = factory or get_session_factory()
    async with factory() as session:
        await session.execute(READ_ONLY_TRANSACTION)
        yield session
