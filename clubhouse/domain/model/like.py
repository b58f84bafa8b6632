"""Comment like record.

A normalized record written alongside the liker list on the comment, one
per (user, comment). Downstream collaborators such as notification
triggers watch these records.
"""

from datetime import datetime

from pydantic import Field

from clubhouse.domain.model.common import DomainModel
from clubhouse.domain.value import CommentId, LikeId, PostId, UserId


class CommentLike(DomainModel):
    """Comment like entity.

    Business rules:
    - Exists exactly while user_id is in the comment's liked_by_user_ids
    - id is derived from (user_id, comment_id), see like_id_for()
    """

    id: LikeId
    user_id: UserId
    comment_id: CommentId
    comment_author_id: UserId
    post_id: PostId
    created_at: datetime = Field(default_factory=datetime.now)
