"""Test configuration and fixtures."""

from datetime import datetime

from clubhouse.config import CommentSettings, RateLimitSettings
from clubhouse.application.session import CommentThreadSession
from clubhouse.domain.model import Comment, Post
from clubhouse.domain.repository import DocumentStore
from clubhouse.domain.service import (
    CommentService,
    CounterService,
    LikeService,
    RateLimitService,
)
from clubhouse.domain.value import CommentId, PostId, UserId
from clubhouse.persistence.repository import DocumentCommentRepository
from clubhouse.persistence.repository.inmemory import InMemoryRateLimitRepository


def make_comment(
    comment_id: str,
    author: str = "alice",
    content: str = "Nice shot",
    parent: Comment | None = None,
    post_id: str = "post-1",
    **overrides,
) -> Comment:
    """Build a confirmed comment, deriving depth from ``parent``."""
    values = dict(
        id=CommentId(comment_id),
        post_id=PostId(post_id),
        author_id=UserId(author),
        content=content,
        parent_id=parent.id if parent else None,
        parent_author_id=parent.author_id if parent else None,
        depth=parent.depth + 1 if parent else 0,
        created_at=datetime(2026, 5, 1, 9, 0, 0),
    )
    values.update(overrides)
    return Comment(**values)


async def seed_post(
    store: DocumentStore, post_id: str = "post-1", author: str = "pat"
) -> Post:
    """Write a post record the thread can hang off."""
    repo = DocumentCommentRepository(store)
    return await repo.save_post(Post(id=PostId(post_id), author_id=UserId(author)))


def make_session(
    store: DocumentStore,
    user: str = "alice",
    post_id: str = "post-1",
    settings: CommentSettings | None = None,
    rate_limits: RateLimitSettings | None = None,
    rate_limit_repository: InMemoryRateLimitRepository | None = None,
    clock=datetime.now,
) -> CommentThreadSession:
    """Wire a thread session over ``store`` without the container."""
    repo = DocumentCommentRepository(store)
    counter_service = CounterService(repo)
    return CommentThreadSession(
        post_id=PostId(post_id),
        user_id=UserId(user),
        comment_repository=repo,
        comment_service=CommentService(repo, counter_service, clock=clock),
        like_service=LikeService(repo, clock=clock),
        rate_limit_service=RateLimitService(
            rate_limit_repository or InMemoryRateLimitRepository(),
            rate_limits or RateLimitSettings(comment=0),
            clock=clock,
        ),
        settings=settings or CommentSettings(),
        clock=clock,
    )
