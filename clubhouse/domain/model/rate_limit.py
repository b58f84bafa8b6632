"""Rate limit record."""

from datetime import datetime

from clubhouse.domain.model.common import DomainModel
from clubhouse.domain.value import ActionKind, UserId


class RateLimitRecord(DomainModel):
    """Last time a user performed a throttled action."""

    user_id: UserId
    action: ActionKind
    last_action_at: datetime
