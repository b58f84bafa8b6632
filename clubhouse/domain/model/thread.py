"""Thread tree projection."""

from collections.abc import Iterator

from pydantic import Field

from clubhouse.domain.model.comment import Comment
from clubhouse.domain.model.common import DomainModel
from clubhouse.domain.value import CommentId


class ThreadTree(DomainModel):
    """Derived parent -> children view of a comment list.

    Owns nothing: it is rebuilt from the flat list on every change.
    """

    top_level: tuple[Comment, ...] = ()
    replies_by_parent_id: dict[CommentId, tuple[Comment, ...]] = Field(
        default_factory=dict
    )

    def replies_for(self, comment_id: CommentId) -> tuple[Comment, ...]:
        """Direct replies to a comment, in list order."""
        return self.replies_by_parent_id.get(comment_id, ())

    def walk(self) -> Iterator[tuple[Comment, int]]:
        """Yield (comment, nesting level) depth-first in display order.

        Replies whose parent is absent from the tree are never reached.
        """
        stack = [(comment, 0) for comment in reversed(self.top_level)]
        seen: set[CommentId] = set()
        while stack:
            comment, level = stack.pop()
            if comment.id in seen:
                continue
            seen.add(comment.id)
            yield comment, level
            for reply in reversed(self.replies_for(comment.id)):
                stack.append((reply, level + 1))
