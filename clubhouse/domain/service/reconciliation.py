"""Optimistic-entry reconciliation.

Pending placeholders and confirmed records are kept as two separate lists
and merged here on every snapshot, so the "no duplicate, no loss" rule can
be checked without any I/O.
"""

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field

from clubhouse.domain.model.comment import Comment
from clubhouse.domain.value import CommentId


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of merging confirmed records with pending placeholders."""

    visible: list[Comment]
    pending: list[Comment]
    matched: dict[CommentId, Comment] = field(default_factory=dict)


def _content_key(comment: Comment) -> tuple[str, str]:
    return (comment.author_id, comment.content)


def match_pending(
    confirmed: Sequence[Comment], pending: Sequence[Comment]
) -> dict[CommentId, Comment]:
    """Pair pending placeholders with the confirmed records that settle them.

    A confirmed record carrying a client token settles only the pending
    entry with that token. A record without one falls back to
    (author_id, content) equality against the oldest unsettled placeholder.
    Each confirmed record settles at most one placeholder.

    Returns:
        Map of pending id -> confirmed record
    """
    by_token = {p.client_token: p for p in pending if p.client_token}
    by_content: dict[tuple[str, str], list[Comment]] = defaultdict(list)
    for p in pending:
        by_content[_content_key(p)].append(p)

    matched: dict[CommentId, Comment] = {}
    untokened: list[Comment] = []

    # Token matches first so they cannot be stolen by a content match
    for record in confirmed:
        if record.client_token:
            placeholder = by_token.get(record.client_token)
            if placeholder is not None and placeholder.id not in matched:
                matched[placeholder.id] = record
        else:
            untokened.append(record)

    for record in untokened:
        for placeholder in by_content.get(_content_key(record), []):
            if placeholder.id not in matched:
                matched[placeholder.id] = record
                break

    return matched


def reconcile(confirmed: Sequence[Comment], pending: Sequence[Comment]) -> ReconcileResult:
    """Merge a confirmed snapshot with the pending buffer.

    Confirmed records come first in snapshot order; pending placeholders
    without a confirmed counterpart follow in submission order. A settled
    placeholder is dropped in the same result that admits its record, so
    the two are never visible together.

    Args:
        confirmed: Authoritative records from the latest snapshot
        pending: Unconfirmed local placeholders, oldest first

    Returns:
        Visible list, remaining pending buffer and the settled pairs
    """
    matched = match_pending(confirmed, pending)
    still_pending = [p for p in pending if p.id not in matched]
    return ReconcileResult(
        visible=[*confirmed, *still_pending],
        pending=still_pending,
        matched=matched,
    )
