"""Document-store implementation of the Comment repository."""

from collections.abc import Sequence
from typing import Optional

from clubhouse.domain.model import Comment, CommentLike, Post, Snapshot
from clubhouse.domain.repository import (
    CommentRepository,
    CommentSubscription,
    DocumentStore,
)
from clubhouse.domain.value import (
    ArrayLength,
    ArrayRemove,
    ArrayUnion,
    CommentId,
    FieldFilter,
    LikeId,
    OrderBy,
    PostId,
    ServerTimestamp,
    UserId,
)
from clubhouse.persistence.mappers import (
    COMMENT_LIKES_COLLECTION,
    POSTS_COLLECTION,
    comment_to_fields,
    comments_collection,
    document_to_comment,
    document_to_like,
    document_to_post,
    like_to_fields,
    post_to_fields,
)

LIVE_COMMENTS = (FieldFilter(field="isDeleted", value=False),)
OLDEST_FIRST = (OrderBy(field="createdAt"),)
LIKE_COUNT = ArrayLength(source="likedBy")


class DocumentCommentRepository(CommentRepository):
    """CommentRepository over any DocumentStore.

    Layout:
    - posts/{post_id}: post with its ``comments`` counter
    - posts/{post_id}/comments/{comment_id}: comment records
    - comment_likes/{user_id}_{comment_id}: like records
    """

    def __init__(self, store: DocumentStore) -> None:
        """Initialize repository with a document store.

        Args:
            store: Backing document store
        """
        self.store = store

    async def create(self, comment: Comment) -> CommentId:
        """Write a confirmed comment; the store assigns the id."""
        if comment.is_pending:
            raise ValueError("Pending placeholders are never written")
        document_id = await self.store.create(
            comments_collection(comment.post_id), comment_to_fields(comment)
        )
        return CommentId(document_id)

    async def find_by_id(
        self, post_id: PostId, comment_id: CommentId
    ) -> Optional[Comment]:
        """Find a comment by ID."""
        document = await self.store.get(comments_collection(post_id), comment_id)
        return document_to_comment(document, post_id) if document else None

    async def find_by_post(
        self, post_id: PostId, include_deleted: bool = False
    ) -> list[Comment]:
        """Read the current comments under a post, oldest first."""
        filters = () if include_deleted else LIVE_COMMENTS
        async with await self.store.subscribe(
            comments_collection(post_id), filters, OLDEST_FIRST
        ) as subscription:
            snapshot = await subscription.__anext__()
        return [document_to_comment(doc, post_id) for doc in snapshot.documents]

    async def update_content(
        self, post_id: PostId, comment_id: CommentId, content: str
    ) -> None:
        """Replace a comment's text."""
        await self.store.update(
            comments_collection(post_id),
            comment_id,
            {"content": content, "updatedAt": ServerTimestamp()},
        )

    async def soft_delete(self, post_id: PostId, comment_id: CommentId) -> None:
        """Flag a comment deleted."""
        await self.store.update(
            comments_collection(post_id),
            comment_id,
            {"isDeleted": True, "deletedAt": ServerTimestamp()},
        )

    async def restore(self, post_id: PostId, comment_id: CommentId) -> None:
        """Undo a soft delete."""
        await self.store.update(
            comments_collection(post_id),
            comment_id,
            {"isDeleted": False, "deletedAt": None},
        )

    async def increment_reply_count(
        self, post_id: PostId, comment_id: CommentId, delta: int
    ) -> None:
        """Atomically adjust replyCount."""
        await self.store.increment_field(
            comments_collection(post_id), comment_id, "replyCount", delta
        )

    async def increment_post_comment_count(self, post_id: PostId, delta: int) -> None:
        """Atomically adjust the post's comments counter."""
        await self.store.increment_field(POSTS_COLLECTION, post_id, "comments", delta)

    async def add_liker(
        self, post_id: PostId, comment_id: CommentId, user_id: UserId
    ) -> None:
        """Add to likedBy and recount likes in one atomic update."""
        await self.store.update(
            comments_collection(post_id),
            comment_id,
            {"likedBy": ArrayUnion(values=(user_id,)), "likes": LIKE_COUNT},
        )

    async def remove_liker(
        self, post_id: PostId, comment_id: CommentId, user_id: UserId
    ) -> None:
        """Remove from likedBy and recount likes in one atomic update."""
        await self.store.update(
            comments_collection(post_id),
            comment_id,
            {"likedBy": ArrayRemove(values=(user_id,)), "likes": LIKE_COUNT},
        )

    async def save_like(self, like: CommentLike) -> CommentLike:
        """Create or replace a like record."""
        await self.store.set(COMMENT_LIKES_COLLECTION, like.id, like_to_fields(like))
        return like

    async def delete_like(self, like_id: LikeId) -> None:
        """Delete a like record."""
        await self.store.delete(COMMENT_LIKES_COLLECTION, like_id)

    async def find_like(self, like_id: LikeId) -> Optional[CommentLike]:
        """Find a like record by id."""
        document = await self.store.get(COMMENT_LIKES_COLLECTION, like_id)
        return document_to_like(document) if document else None

    async def find_likes_by_comment(self, comment_id: CommentId) -> Sequence[CommentLike]:
        """Read every like record for a comment."""
        async with await self.store.subscribe(
            COMMENT_LIKES_COLLECTION,
            (FieldFilter(field="commentId", value=comment_id),),
        ) as subscription:
            snapshot = await subscription.__anext__()
        return [document_to_like(doc) for doc in snapshot.documents]

    async def find_post(self, post_id: PostId) -> Optional[Post]:
        """Find a post by ID."""
        document = await self.store.get(POSTS_COLLECTION, post_id)
        return document_to_post(document) if document else None

    async def save_post(self, post: Post) -> Post:
        """Create or replace a post."""
        await self.store.set(POSTS_COLLECTION, post.id, post_to_fields(post))
        return post

    async def subscribe(self, post_id: PostId) -> CommentSubscription:
        """Live, non-deleted comments under a post, oldest first."""
        subscription = await self.store.subscribe(
            comments_collection(post_id), LIVE_COMMENTS, OLDEST_FIRST
        )

        def to_comments(snapshot: Snapshot) -> list[Comment]:
            return [document_to_comment(doc, post_id) for doc in snapshot.documents]

        return CommentSubscription(subscription, to_comments)
