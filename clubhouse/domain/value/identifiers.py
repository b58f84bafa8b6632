"""Strongly typed identifiers for clubhouse domain entities.

Document stores assign string identifiers, so every id wraps ``str``.
Using NewType keeps comment, post and user ids from being mixed up.
"""

from typing import NewType
from uuid import uuid4

UserId = NewType("UserId", str)
PostId = NewType("PostId", str)
CommentId = NewType("CommentId", str)
LikeId = NewType("LikeId", str)

# Locally generated placeholder ids carry this prefix. Store-assigned ids
# are bare uuid hex strings, so the two forms can never collide.
PENDING_ID_PREFIX = "pending_"


def new_pending_comment_id() -> CommentId:
    """Generate a placeholder id for an unconfirmed comment."""
    return CommentId(f"{PENDING_ID_PREFIX}{uuid4().hex}")


def is_pending_comment_id(comment_id: str) -> bool:
    """Whether an id was generated locally for an unconfirmed comment."""
    return comment_id.startswith(PENDING_ID_PREFIX)


def like_id_for(user_id: UserId, comment_id: CommentId) -> LikeId:
    """Deterministic like-record id, one per user per comment."""
    return LikeId(f"{user_id}_{comment_id}")
