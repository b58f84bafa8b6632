"""Post entity (the parts the comment thread depends on)."""

from datetime import datetime

from pydantic import Field

from clubhouse.domain.model.common import DomainModel
from clubhouse.domain.value import PostId, UserId


class Post(DomainModel):
    """Post entity.

    comment_count is maintained by atomic increments, never rewritten.
    """

    id: PostId
    author_id: UserId
    content: str = ""
    comment_count: int = 0
    created_at: datetime = Field(default_factory=datetime.now)
