"""PostgreSQL implementation of the RateLimit repository."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clubhouse.domain.model.rate_limit import RateLimitRecord
from clubhouse.domain.repository import RateLimitRepository
from clubhouse.domain.value import ActionKind, UserId
from clubhouse.persistence.database import transaction
from clubhouse.persistence.tables import rate_limits_table


class PostgresRateLimitRepository(RateLimitRepository):
    """PostgreSQL implementation of RateLimitRepository."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize repository with a session factory.

        Args:
            session_factory: SQLAlchemy async session factory
        """
        self.session_factory = session_factory

    async def find(
        self, user_id: UserId, action: ActionKind
    ) -> Optional[RateLimitRecord]:
        """Find the last-action record."""
        stmt = select(rate_limits_table).where(
            rate_limits_table.c.user_id == user_id,
            rate_limits_table.c.action == action.value,
        )
        async with self.session_factory() as session:
            row = (await session.execute(stmt)).fetchone()
        if row is None:
            return None
        data = row._asdict()
        return RateLimitRecord(
            user_id=UserId(data["user_id"]),
            action=ActionKind(data["action"]),
            last_action_at=data["last_action_at"],
        )

    async def save(self, record: RateLimitRecord) -> RateLimitRecord:
        """Upsert a last-action record."""
        stmt = (
            insert(rate_limits_table)
            .values(
                user_id=record.user_id,
                action=record.action.value,
                last_action_at=record.last_action_at,
            )
            .on_conflict_do_update(
                index_elements=[rate_limits_table.c.user_id, rate_limits_table.c.action],
                set_={"last_action_at": record.last_action_at},
            )
        )
        async with transaction(self.session_factory) as session:
            await session.execute(stmt)
        return record
