"""Database engine and transaction helpers for the PostgreSQL store."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from clubhouse.config import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine from ``settings.database``.

    SQL is echoed when ``settings.debug`` is set.
    """
    database = settings.database
    return create_async_engine(
        database.url,
        echo=settings.debug,
        pool_pre_ping=True,  # Subscriptions hold the pool for long periods
        pool_size=database.pool_size,
        max_overflow=database.max_overflow,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory shared by the store and repositories."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@asynccontextmanager
async def transaction(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Open a session inside one transaction.

    Commits when the block exits normally and rolls back if it raises.
    """
    async with session_factory() as session, session.begin():
        yield session
