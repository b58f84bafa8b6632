"""Counter maintenance domain service."""

import logfire

from clubhouse.domain.repository import CommentRepository
from clubhouse.domain.value import CommentId, PostId

from .base import Service


class CounterService(Service):
    """Keeps reply and post comment counters in step with creates/deletes.

    Counters are only ever changed by delta-based atomic increments, never
    by read-modify-write, so concurrent replies from different users never
    lose updates. Creates pair with +1, deletes with -1, edits never touch
    counters.
    """

    def __init__(self, comment_repository: CommentRepository) -> None:
        """Initialize counter service.

        Args:
            comment_repository: Comment repository
        """
        self.comment_repository = comment_repository

    async def increment_reply_count(
        self, post_id: PostId, parent_id: CommentId, delta: int
    ) -> None:
        """Atomically adjust a parent comment's reply count.

        Args:
            post_id: Post the parent belongs to
            parent_id: Parent comment ID
            delta: +1 for a new reply, -1 for a deleted one
        """
        with logfire.span(
            "counter_service.increment_reply_count",
            post_id=post_id,
            parent_id=parent_id,
            delta=delta,
        ):
            await self.comment_repository.increment_reply_count(
                post_id, parent_id, delta
            )

    async def increment_post_comment_count(self, post_id: PostId, delta: int) -> None:
        """Atomically adjust a post's total comment count.

        Args:
            post_id: Post ID
            delta: +1 for a new comment, -1 for a deleted one
        """
        with logfire.span(
            "counter_service.increment_post_comment_count",
            post_id=post_id,
            delta=delta,
        ):
            await self.comment_repository.increment_post_comment_count(post_id, delta)
