"""In-memory rate limit repository for testing."""

from typing import Optional

from clubhouse.domain.model.rate_limit import RateLimitRecord
from clubhouse.domain.repository import RateLimitRepository
from clubhouse.domain.value import ActionKind, UserId


class InMemoryRateLimitRepository(RateLimitRepository):
    """In-memory implementation of RateLimitRepository for testing."""

    def __init__(self) -> None:
        self._records: dict[tuple[UserId, ActionKind], RateLimitRecord] = {}

    async def find(
        self, user_id: UserId, action: ActionKind
    ) -> Optional[RateLimitRecord]:
        """Find the last-action record."""
        return self._records.get((user_id, action))

    async def save(self, record: RateLimitRecord) -> RateLimitRecord:
        """Save or replace a last-action record."""
        self._records[(record.user_id, record.action)] = record
        return record
