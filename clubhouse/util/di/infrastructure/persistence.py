"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from clubhouse.config import Settings
from clubhouse.domain.repository import (
    CommentRepository,
    DocumentStore,
    RateLimitRepository,
)
from clubhouse.persistence.database import create_engine, create_session_factory
from clubhouse.persistence.repository import (
    DocumentCommentRepository,
    PostgresDocumentStore,
    PostgresRateLimitRepository,
)
from clubhouse.util.di.base import ProviderBase
from clubhouse.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider using PostgreSQL."""

    __is_mock__ = False

    scope = Scope.APP

    @provide(scope=Scope.APP)
    async def get_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        """Provide database engine, disposed when the container closes."""
        engine = create_engine(settings)
        # Instrument SQLAlchemy for observability
        instrument_sqlalchemy(engine)
        yield engine
        await engine.dispose()
        logfire.info("Database engine disposed")

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        """Provide session factory."""
        return create_session_factory(engine)

    @provide(scope=Scope.APP)
    def get_document_store(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
    ) -> DocumentStore:
        """Provide the document store.

        APP-scoped so every thread session shares one set of pollers.
        """
        return PostgresDocumentStore(
            session_factory,
            poll_interval_seconds=settings.document_store.poll_interval_seconds,
        )

    @provide(scope=Scope.APP)
    def get_rate_limit_repository(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> RateLimitRepository:
        """Provide RateLimit repository."""
        return PostgresRateLimitRepository(session_factory)

    @provide(scope=Scope.REQUEST)
    def get_comment_repository(self, store: DocumentStore) -> CommentRepository:
        """Provide Comment repository."""
        return DocumentCommentRepository(store)
