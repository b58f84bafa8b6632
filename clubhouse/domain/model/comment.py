"""Comment entity.

Comments are threaded discussions on posts with unlimited depth. Threading
is a flat list of records linked by ``parent_id``; the nested view is
rebuilt from that list on every change (see ``build_tree``).
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from clubhouse.domain.model.common import DomainModel
from clubhouse.domain.value import (
    MAX_COMMENT_LENGTH,
    CommentId,
    PostId,
    UserId,
    is_pending_comment_id,
)


class Comment(DomainModel):
    """Comment entity.

    Represents a comment on a post or a reply to another comment.

    Threading is managed through:
    - parent_id: Direct parent comment (None for top-level)
    - depth: Nesting level (0 for top-level, parent depth + 1 for replies)

    Lifecycle:
    - is_pending is True only for local placeholders that the document
      store has not confirmed yet; their ids use the pending id form
    - deleted_at is set by a soft delete
    """

    id: CommentId
    post_id: PostId
    author_id: UserId
    content: str = Field(min_length=1, max_length=MAX_COMMENT_LENGTH)
    parent_id: Optional[CommentId] = None
    parent_author_id: Optional[UserId] = None
    post_author_id: Optional[UserId] = None
    depth: int = Field(default=0, ge=0)
    reply_count: int = Field(default=0, ge=0)
    like_count: int = Field(default=0, ge=0)
    liked_by_user_ids: tuple[UserId, ...] = ()
    is_pending: bool = False
    client_token: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_invariants(self) -> "Comment":
        """Enforce the depth, like and pending-id invariants."""
        if self.parent_id is None and self.depth != 0:
            raise ValueError("Top-level comments must have depth 0")
        if self.parent_id is not None and self.depth < 1:
            raise ValueError("Replies must have depth >= 1")
        if len(set(self.liked_by_user_ids)) != len(self.liked_by_user_ids):
            raise ValueError("liked_by_user_ids must not contain duplicates")
        if self.like_count != len(self.liked_by_user_ids):
            raise ValueError("like_count must equal the number of likers")
        if self.is_pending != is_pending_comment_id(self.id):
            raise ValueError("Only pending comments may use a pending id")
        return self

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None

    def is_liked_by(self, user_id: UserId) -> bool:
        return user_id in self.liked_by_user_ids

    def with_content(self, content: str, updated_at: datetime | None = None) -> "Comment":
        """Copy with the text replaced; identity is preserved."""
        return self.replace(content=content, updated_at=updated_at or datetime.now())

    def with_like_toggled(self, user_id: UserId) -> "Comment":
        """Copy with ``user_id`` added to or removed from the likers."""
        if self.is_liked_by(user_id):
            likers = tuple(u for u in self.liked_by_user_ids if u != user_id)
        else:
            likers = (*self.liked_by_user_ids, user_id)
        return self.replace(liked_by_user_ids=likers, like_count=len(likers))
