"""Rate limit record repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from clubhouse.domain.model.rate_limit import RateLimitRecord
from clubhouse.domain.value import ActionKind, UserId


class RateLimitRepository(ABC):
    """Durable per-user, per-action last-action timestamps."""

    @abstractmethod
    async def find(
        self, user_id: UserId, action: ActionKind
    ) -> Optional[RateLimitRecord]:
        """Find the last-action record for a user and action kind.

        Returns:
            The record if the user has performed the action before
        """
        pass

    @abstractmethod
    async def save(self, record: RateLimitRecord) -> RateLimitRecord:
        """Create or replace a last-action record.

        Args:
            record: The record to store

        Returns:
            The stored record
        """
        pass
