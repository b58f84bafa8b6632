"""Rate limit domain service."""

import math
from collections.abc import Callable
from datetime import datetime

import logfire

from clubhouse.config import RateLimitSettings
from clubhouse.domain.model.rate_limit import RateLimitRecord
from clubhouse.domain.repository import RateLimitRepository
from clubhouse.domain.value import ActionKind, RateLimitDecision, UserId

from .base import Service

_ACTION_LABELS = {
    ActionKind.POST: "post",
    ActionKind.COMMENT: "comment",
    ActionKind.MESSAGE: "message",
    ActionKind.SCORE: "log a score",
}


def get_rate_limit_message(action: ActionKind, remaining_seconds: int) -> str:
    """Friendly cooldown message for a rejected action.

    Args:
        action: The throttled action
        remaining_seconds: Seconds left in the cooldown

    Returns:
        e.g. "Please wait 3 seconds before you comment again."
    """
    label = _ACTION_LABELS[action]
    if remaining_seconds > 60:
        minutes = math.ceil(remaining_seconds / 60)
        unit = "minute" if minutes == 1 else "minutes"
        return f"Please wait {minutes} {unit} before you {label} again."
    unit = "second" if remaining_seconds == 1 else "seconds"
    return f"Please wait {remaining_seconds} {unit} before you {label} again."


class RateLimitService(Service):
    """Cooldown gate backed by durable last-action timestamps.

    Every check re-reads the durable record; nothing is cached.
    """

    def __init__(
        self,
        rate_limit_repository: RateLimitRepository,
        settings: RateLimitSettings,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize rate limit service.

        Args:
            rate_limit_repository: Durable last-action records
            settings: Cooldown window per action kind
            clock: Source of the current time
        """
        self.rate_limit_repository = rate_limit_repository
        self.settings = settings
        self.clock = clock

    def cooldown_seconds(self, action: ActionKind) -> int:
        """Cooldown window configured for an action kind."""
        return getattr(self.settings, action.value)

    async def check_rate_limit(
        self, user_id: UserId, action: ActionKind
    ) -> RateLimitDecision:
        """Check whether a user may perform a throttled action now.

        Fails open: if the durable record cannot be read the action is
        allowed and the failure is logged.

        Args:
            user_id: Acting user
            action: Throttled action kind

        Returns:
            Decision with the remaining cooldown (0 when allowed)
        """
        with logfire.span(
            "rate_limit_service.check_rate_limit",
            user_id=user_id,
            action=action.value,
        ):
            try:
                record = await self.rate_limit_repository.find(user_id, action)
            except Exception as e:
                logfire.warn(
                    "Rate limit record unreadable, allowing action",
                    user_id=user_id,
                    action=action.value,
                    error=str(e),
                )
                return RateLimitDecision(allowed=True)

            if record is None:
                return RateLimitDecision(allowed=True)

            window = self.cooldown_seconds(action)
            elapsed = (self.clock() - record.last_action_at).total_seconds()
            if elapsed >= window:
                return RateLimitDecision(allowed=True)

            remaining = max(1, math.ceil(window - elapsed))
            logfire.info(
                "Action rate limited",
                user_id=user_id,
                action=action.value,
                remaining_seconds=remaining,
            )
            return RateLimitDecision(allowed=False, remaining_seconds=remaining)

    async def update_rate_limit_timestamp(
        self, user_id: UserId, action: ActionKind
    ) -> RateLimitRecord:
        """Record that an action was accepted.

        Call only after the action was actually accepted, so failed
        submissions never consume the user's budget.

        Args:
            user_id: Acting user
            action: Throttled action kind

        Returns:
            The stored record
        """
        with logfire.span(
            "rate_limit_service.update_rate_limit_timestamp",
            user_id=user_id,
            action=action.value,
        ):
            record = RateLimitRecord(
                user_id=user_id, action=action, last_action_at=self.clock()
            )
            return await self.rate_limit_repository.save(record)
