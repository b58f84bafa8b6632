"""Like toggle domain service."""

from collections.abc import Callable
from datetime import datetime

import logfire

from clubhouse.domain.error import NotFoundError
from clubhouse.domain.model.like import CommentLike
from clubhouse.domain.repository import CommentRepository
from clubhouse.domain.value import CommentId, PostId, UserId, like_id_for

from .base import Service


class LikeService(Service):
    """Domain service for comment likes.

    A like is two writes: the liker list plus counter on the comment, and a
    normalized like record. If the second write fails the first is undone,
    so a like record exists exactly while the user is in the liker list.
    """

    def __init__(
        self,
        comment_repository: CommentRepository,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize like service.

        Args:
            comment_repository: Comment repository
            clock: Source of like record timestamps
        """
        self.comment_repository = comment_repository
        self.clock = clock

    async def toggle_like(
        self, post_id: PostId, comment_id: CommentId, user_id: UserId
    ) -> bool:
        """Like a comment, or unlike it if the user already liked it.

        Membership is decided from the stored comment, not from any local
        copy.

        Args:
            post_id: Post the comment belongs to
            comment_id: Comment ID
            user_id: Acting user

        Returns:
            True if the comment is now liked by the user, False if unliked

        Raises:
            NotFoundError: If the comment doesn't exist or is deleted
        """
        with logfire.span(
            "like_service.toggle_like",
            post_id=post_id,
            comment_id=comment_id,
            user_id=user_id,
        ):
            comment = await self.comment_repository.find_by_id(post_id, comment_id)
            if comment is None or comment.deleted_at is not None:
                logfire.warn("Like on missing comment", comment_id=comment_id)
                raise NotFoundError("Comment", comment_id)

            if comment.is_liked_by(user_id):
                await self._unlike(post_id, comment_id, user_id)
                logfire.info("Comment unliked", comment_id=comment_id, user_id=user_id)
                return False

            like = CommentLike(
                id=like_id_for(user_id, comment_id),
                user_id=user_id,
                comment_id=comment_id,
                comment_author_id=comment.author_id,
                post_id=post_id,
                created_at=self.clock(),
            )
            await self._like(like)
            logfire.info("Comment liked", comment_id=comment_id, user_id=user_id)
            return True

    async def _like(self, like: CommentLike) -> None:
        await self.comment_repository.add_liker(
            like.post_id, like.comment_id, like.user_id
        )
        try:
            await self.comment_repository.save_like(like)
        except Exception:
            logfire.error(
                "Like record write failed, reverting liker",
                comment_id=like.comment_id,
                user_id=like.user_id,
            )
            await self.comment_repository.remove_liker(
                like.post_id, like.comment_id, like.user_id
            )
            raise

    async def _unlike(
        self, post_id: PostId, comment_id: CommentId, user_id: UserId
    ) -> None:
        await self.comment_repository.remove_liker(post_id, comment_id, user_id)
        like_id = like_id_for(user_id, comment_id)
        try:
            await self.comment_repository.delete_like(like_id)
        except Exception:
            logfire.error(
                "Like record delete failed, restoring liker",
                comment_id=comment_id,
                user_id=user_id,
            )
            await self.comment_repository.add_liker(post_id, comment_id, user_id)
            raise
