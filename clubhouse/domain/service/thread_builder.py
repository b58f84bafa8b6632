"""Thread tree materialization.

Pure functions over the flat comment list. They never mutate their input
and are safe to call on every state change.
"""

from collections import defaultdict
from collections.abc import Sequence

from clubhouse.domain.model.comment import Comment
from clubhouse.domain.model.thread import ThreadTree
from clubhouse.domain.value import CommentId


def build_tree(comments: Sequence[Comment]) -> ThreadTree:
    """Partition a flat comment list into top-level comments and replies.

    Comments without a parent are top-level; every other comment is
    appended to its parent's reply list. Relative order from the input is
    preserved in both. Stored depth is trusted as-is.

    Args:
        comments: Flat list in display order

    Returns:
        A new ThreadTree; equal input always gives an equal tree
    """
    top_level: list[Comment] = []
    replies: dict[CommentId, list[Comment]] = defaultdict(list)

    for comment in comments:
        if comment.parent_id is None:
            top_level.append(comment)
        else:
            replies[comment.parent_id].append(comment)

    return ThreadTree(
        top_level=tuple(top_level),
        replies_by_parent_id={
            parent_id: tuple(children) for parent_id, children in replies.items()
        },
    )


def compute_depths(comments: Sequence[Comment]) -> dict[CommentId, int]:
    """Derive each comment's depth by following parent_id links.

    A comment whose parent is not in the list counts as depth-0 root of its
    own subtree for this computation; so does any comment caught in a
    parent cycle.
    """
    by_id = {comment.id: comment for comment in comments}
    depths: dict[CommentId, int] = {}

    for comment in comments:
        chain: list[CommentId] = []
        on_chain: set[CommentId] = set()
        current: Comment | None = comment
        base = 0
        while current is not None:
            if current.id in depths:
                base = depths[current.id] + 1
                break
            if current.id in on_chain:
                # Cycle: restart numbering from the first repeated node
                chain = chain[: chain.index(current.id)]
                depths[current.id] = 0
                base = 1
                break
            chain.append(current.id)
            on_chain.add(current.id)
            parent_id = current.parent_id
            current = by_id.get(parent_id) if parent_id is not None else None

        for offset, comment_id in enumerate(reversed(chain)):
            depths[comment_id] = base + offset

    return depths


def find_depth_mismatches(comments: Sequence[Comment]) -> list[tuple[Comment, int]]:
    """Report comments whose stored depth disagrees with their parent chain.

    Only comments whose parent is present in the list are checked, since a
    missing parent's depth is unknown.

    Returns:
        (comment, expected_depth) pairs in input order
    """
    by_id = {comment.id: comment for comment in comments}
    depths = compute_depths(comments)
    mismatches = []
    for comment in comments:
        if comment.parent_id is not None and comment.parent_id not in by_id:
            continue
        expected = depths[comment.id]
        if comment.depth != expected:
            mismatches.append((comment, expected))
    return mismatches
