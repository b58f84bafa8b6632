"""Comment repository interface."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Optional

from clubhouse.domain.model.comment import Comment
from clubhouse.domain.model.document import Snapshot
from clubhouse.domain.model.like import CommentLike
from clubhouse.domain.model.post import Post
from clubhouse.domain.repository.subscription import Subscription
from clubhouse.domain.value import CommentId, LikeId, PostId, UserId


class CommentSubscription:
    """Live, ordered list of confirmed comments under one post.

    Wraps a document Subscription and maps each snapshot to comments.
    """

    def __init__(
        self,
        subscription: Subscription,
        to_comments: Callable[[Snapshot], list[Comment]],
    ) -> None:
        self._subscription = subscription
        self._to_comments = to_comments

    @property
    def closed(self) -> bool:
        return self._subscription.closed

    def close(self) -> None:
        self._subscription.close()

    def __aiter__(self) -> "CommentSubscription":
        return self

    async def __anext__(self) -> list[Comment]:
        snapshot = await self._subscription.__anext__()
        return self._to_comments(snapshot)

    async def __aenter__(self) -> "CommentSubscription":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()


class CommentRepository(ABC):
    """Repository for comments, their likes and the post comment counter.

    Defines the contract for comment persistence operations.
    Implementations live in the infrastructure layer.
    """

    @abstractmethod
    async def create(self, comment: Comment) -> CommentId:
        """Write a confirmed comment record.

        The comment's own id is ignored; the store assigns one.

        Args:
            comment: Comment to persist (must not be pending)

        Returns:
            The store-assigned comment id
        """
        pass

    @abstractmethod
    async def find_by_id(
        self, post_id: PostId, comment_id: CommentId
    ) -> Optional[Comment]:
        """Find a comment (including soft-deleted ones) by id."""
        pass

    @abstractmethod
    async def find_by_post(
        self, post_id: PostId, include_deleted: bool = False
    ) -> list[Comment]:
        """Find all comments under a post ordered by created_at ascending."""
        pass

    @abstractmethod
    async def update_content(
        self, post_id: PostId, comment_id: CommentId, content: str
    ) -> None:
        """Replace a comment's text in place."""
        pass

    @abstractmethod
    async def soft_delete(self, post_id: PostId, comment_id: CommentId) -> None:
        """Mark a comment deleted so subscriptions stop delivering it."""
        pass

    @abstractmethod
    async def restore(self, post_id: PostId, comment_id: CommentId) -> None:
        """Clear a soft delete so the comment is delivered again."""
        pass

    @abstractmethod
    async def increment_reply_count(
        self, post_id: PostId, comment_id: CommentId, delta: int
    ) -> None:
        """Atomically adjust a comment's reply counter."""
        pass

    @abstractmethod
    async def increment_post_comment_count(self, post_id: PostId, delta: int) -> None:
        """Atomically adjust a post's total comment counter."""
        pass

    @abstractmethod
    async def add_liker(
        self, post_id: PostId, comment_id: CommentId, user_id: UserId
    ) -> None:
        """Add a user to a comment's likers; the like count follows the list."""
        pass

    @abstractmethod
    async def remove_liker(
        self, post_id: PostId, comment_id: CommentId, user_id: UserId
    ) -> None:
        """Remove a user from a comment's likers; the like count follows the list."""
        pass

    @abstractmethod
    async def save_like(self, like: CommentLike) -> CommentLike:
        """Create or replace a like record."""
        pass

    @abstractmethod
    async def delete_like(self, like_id: LikeId) -> None:
        """Delete a like record. Missing records are ignored."""
        pass

    @abstractmethod
    async def find_like(self, like_id: LikeId) -> Optional[CommentLike]:
        """Find a like record by id."""
        pass

    @abstractmethod
    async def find_likes_by_comment(self, comment_id: CommentId) -> Sequence[CommentLike]:
        """Find every like record for a comment."""
        pass

    @abstractmethod
    async def find_post(self, post_id: PostId) -> Optional[Post]:
        """Find the post a thread hangs off."""
        pass

    @abstractmethod
    async def save_post(self, post: Post) -> Post:
        """Create or replace a post record."""
        pass

    @abstractmethod
    async def subscribe(self, post_id: PostId) -> CommentSubscription:
        """Subscribe to live, non-deleted comments under a post.

        Snapshots are ordered by created_at ascending.
        """
        pass
