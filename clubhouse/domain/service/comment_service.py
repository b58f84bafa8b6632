"""Comment domain service."""

from collections.abc import Callable
from datetime import datetime

import logfire
from pydantic import ValidationError as PydanticValidationError

from clubhouse.domain.error import (
    BusinessRuleViolationError,
    NotAuthorizedError,
    NotFoundError,
    ValidationError,
)
from clubhouse.domain.model.comment import Comment
from clubhouse.domain.repository import CommentRepository
from clubhouse.domain.value import CommentId, CommentText, PostId, UserId

from .base import Service
from .counter_service import CounterService


def validate_comment_text(text: str) -> str:
    """Strip and bound submitted comment text.

    Raises:
        ValidationError: If the text is empty or over-length
    """
    try:
        return CommentText(text).root
    except PydanticValidationError as e:
        raise ValidationError(e.errors()[0]["msg"].removeprefix("Value error, "))


class CommentService(Service):
    """Domain service for confirmed comment writes."""

    def __init__(
        self,
        comment_repository: CommentRepository,
        counter_service: CounterService,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize comment service.

        Args:
            comment_repository: Comment repository
            counter_service: Reply and post counter maintenance
            clock: Source of write timestamps
        """
        self.comment_repository = comment_repository
        self.counter_service = counter_service
        self.clock = clock

    async def create_comment(
        self,
        post_id: PostId,
        author_id: UserId,
        text: str,
        parent_id: CommentId | None = None,
        client_token: str | None = None,
    ) -> Comment:
        """Create a comment on a post or a reply to another comment.

        Writes the record, then bumps the parent's reply count (for replies)
        and the post's comment count. If the counters cannot be updated,
        cancellation included, the record is withdrawn before the error
        propagates.

        Args:
            post_id: Post ID
            author_id: Author user ID
            text: Comment text
            parent_id: Parent comment ID for replies (None for top-level)
            client_token: Idempotency token echoed into the stored record

        Returns:
            The confirmed comment with its store-assigned id

        Raises:
            ValidationError: If text is empty or too long
            NotFoundError: If the post or parent comment doesn't exist
            BusinessRuleViolationError: If the parent belongs to another post
        """
        with logfire.span(
            "comment_service.create_comment",
            post_id=post_id,
            author_id=author_id,
            parent_id=parent_id,
        ):
            content = validate_comment_text(text)

            post = await self.comment_repository.find_post(post_id)
            if post is None:
                logfire.error("Post not found", post_id=post_id)
                raise NotFoundError("Post", post_id)

            depth = 0
            parent_author_id = None
            if parent_id:
                parent = await self.comment_repository.find_by_id(post_id, parent_id)
                if parent is None or parent.deleted_at is not None:
                    logfire.error(
                        "Parent comment not found",
                        parent_id=parent_id,
                        post_id=post_id,
                    )
                    raise NotFoundError("Comment", parent_id)
                if parent.post_id != post_id:
                    logfire.error(
                        "Parent comment does not belong to post",
                        parent_id=parent_id,
                        parent_post_id=parent.post_id,
                        target_post_id=post_id,
                    )
                    raise BusinessRuleViolationError(
                        "Parent comment does not belong to this post"
                    )
                depth = parent.depth + 1
                parent_author_id = parent.author_id

            draft = Comment(
                id=CommentId("unsaved"),
                post_id=post_id,
                author_id=author_id,
                content=content,
                parent_id=parent_id,
                parent_author_id=parent_author_id,
                post_author_id=post.author_id,
                depth=depth,
                client_token=client_token,
                created_at=self.clock(),
            )
            comment_id = await self.comment_repository.create(draft)
            saved = draft.replace(id=comment_id)

            reply_counted = False
            try:
                if parent_id:
                    await self.counter_service.increment_reply_count(
                        post_id, parent_id, 1
                    )
                    reply_counted = True
                await self.counter_service.increment_post_comment_count(post_id, 1)
            except BaseException:
                # Includes cancellation by a caller's write timeout
                logfire.error(
                    "Counter update failed, withdrawing comment",
                    comment_id=comment_id,
                    post_id=post_id,
                )
                await self.comment_repository.soft_delete(post_id, comment_id)
                if reply_counted:
                    await self.counter_service.increment_reply_count(
                        post_id, parent_id, -1
                    )
                raise

            logfire.info(
                "Comment created",
                comment_id=comment_id,
                post_id=post_id,
                depth=depth,
            )
            return saved

    async def get_comments_for_post(
        self, post_id: PostId, include_deleted: bool = False
    ) -> list[Comment]:
        """Get all comments for a post, oldest first."""
        with logfire.span(
            "comment_service.get_comments_for_post",
            post_id=post_id,
            include_deleted=include_deleted,
        ):
            comments = await self.comment_repository.find_by_post(
                post_id=post_id, include_deleted=include_deleted
            )
            logfire.info(
                "Comments retrieved for post", post_id=post_id, count=len(comments)
            )
            return comments

    async def _get_owned_comment(
        self, post_id: PostId, comment_id: CommentId, user_id: UserId
    ) -> Comment:
        comment = await self.comment_repository.find_by_id(post_id, comment_id)
        if comment is None or comment.deleted_at is not None:
            logfire.warn("Comment not found", comment_id=comment_id)
            raise NotFoundError("Comment", comment_id)
        if comment.author_id != user_id:
            raise NotAuthorizedError("comment", comment_id, user_id)
        return comment

    async def update_content(
        self, post_id: PostId, comment_id: CommentId, user_id: UserId, text: str
    ) -> Comment:
        """Replace the text of a comment the user wrote.

        Identity, counters and thread position are unchanged.

        Returns:
            The updated comment

        Raises:
            ValidationError: If text is empty or too long
            NotFoundError: If the comment doesn't exist or is deleted
            NotAuthorizedError: If the user is not the author
        """
        with logfire.span(
            "comment_service.update_content",
            post_id=post_id,
            comment_id=comment_id,
            text_length=len(text),
        ):
            content = validate_comment_text(text)
            comment = await self._get_owned_comment(post_id, comment_id, user_id)
            await self.comment_repository.update_content(post_id, comment_id, content)
            logfire.info("Comment text updated", comment_id=comment_id)
            return comment.with_content(content, updated_at=self.clock())

    async def delete_comment(
        self, post_id: PostId, comment_id: CommentId, user_id: UserId
    ) -> Comment:
        """Soft-delete a comment the user wrote and decrement its counters.

        If the counters cannot be updated, cancellation included, the
        comment is restored before the error propagates.

        Returns:
            The comment as it was before deletion

        Raises:
            NotFoundError: If the comment doesn't exist or is already deleted
            NotAuthorizedError: If the user is not the author
        """
        with logfire.span(
            "comment_service.delete_comment",
            post_id=post_id,
            comment_id=comment_id,
        ):
            comment = await self._get_owned_comment(post_id, comment_id, user_id)
            await self.comment_repository.soft_delete(post_id, comment_id)

            reply_uncounted = False
            try:
                if comment.parent_id:
                    await self.counter_service.increment_reply_count(
                        post_id, comment.parent_id, -1
                    )
                    reply_uncounted = True
                await self.counter_service.increment_post_comment_count(post_id, -1)
            except BaseException:
                # Includes cancellation by a caller's write timeout
                logfire.error(
                    "Counter update failed, restoring comment",
                    comment_id=comment_id,
                    post_id=post_id,
                )
                await self.comment_repository.restore(post_id, comment_id)
                if reply_uncounted:
                    await self.counter_service.increment_reply_count(
                        post_id, comment.parent_id, 1
                    )
                raise

            logfire.info("Comment deleted", comment_id=comment_id, post_id=post_id)
            return comment
