"""Live comment thread sessions."""

from .comment_thread import CommentThreadSession

__all__ = ["CommentThreadSession"]
