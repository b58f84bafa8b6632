"""Domain value objects for clubhouse."""

from clubhouse.domain.value.identifiers import (
    PENDING_ID_PREFIX,
    CommentId,
    LikeId,
    PostId,
    UserId,
    is_pending_comment_id,
    like_id_for,
    new_pending_comment_id,
)
from clubhouse.domain.value.types import (
    MAX_COMMENT_LENGTH,
    ActionKind,
    ArrayLength,
    ArrayRemove,
    ArrayUnion,
    CommentText,
    FieldFilter,
    FieldTransform,
    FilterOp,
    Increment,
    OrderBy,
    RateLimitDecision,
    ServerTimestamp,
)

__all__ = [
    # Identifiers
    "UserId",
    "PostId",
    "CommentId",
    "LikeId",
    "PENDING_ID_PREFIX",
    "new_pending_comment_id",
    "is_pending_comment_id",
    "like_id_for",
    # Types
    "MAX_COMMENT_LENGTH",
    "ActionKind",
    "CommentText",
    "RateLimitDecision",
    "FilterOp",
    "FieldFilter",
    "OrderBy",
    "FieldTransform",
    "Increment",
    "ArrayUnion",
    "ArrayRemove",
    "ArrayLength",
    "ServerTimestamp",
]
