"""Domain model entities for clubhouse."""

from clubhouse.domain.model.comment import Comment
from clubhouse.domain.model.document import Document, Snapshot
from clubhouse.domain.model.like import CommentLike
from clubhouse.domain.model.post import Post
from clubhouse.domain.model.rate_limit import RateLimitRecord
from clubhouse.domain.model.thread import ThreadTree

__all__ = [
    "Comment",
    "CommentLike",
    "Document",
    "Post",
    "RateLimitRecord",
    "Snapshot",
    "ThreadTree",
]
