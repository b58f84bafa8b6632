"""Open comment thread use case."""

from collections.abc import Callable
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from clubhouse.config import CommentSettings
from clubhouse.domain.error import NotFoundError
from clubhouse.domain.repository import CommentRepository
from clubhouse.domain.service import CommentService, LikeService, RateLimitService
from clubhouse.domain.value import PostId, UserId
from clubhouse.application.session import CommentThreadSession
from clubhouse.application.usecase.base import BaseUseCase


class OpenCommentThreadRequest(BaseModel):
    """Open comment thread request."""

    post_id: str
    user_id: str  # Viewing user; author of every action in the session


class OpenCommentThreadResponse(BaseModel):
    """Open comment thread response."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    session: CommentThreadSession
    post_author_id: str
    comment_count: int  # Post-level counter as stored


class OpenCommentThreadUseCase(
    BaseUseCase[OpenCommentThreadRequest, OpenCommentThreadResponse]
):
    """Use case for opening a live comment thread on a post."""

    def __init__(
        self,
        comment_repository: CommentRepository,
        comment_service: CommentService,
        like_service: LikeService,
        rate_limit_service: RateLimitService,
        settings: CommentSettings,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize open thread use case.

        Args:
            comment_repository: Comment repository
            comment_service: Comment domain service
            like_service: Like domain service
            rate_limit_service: Rate limit domain service
            settings: Comment thread settings
            clock: Source of placeholder timestamps
        """
        self.comment_repository = comment_repository
        self.comment_service = comment_service
        self.like_service = like_service
        self.rate_limit_service = rate_limit_service
        self.settings = settings
        self.clock = clock

    async def execute(
        self, request: OpenCommentThreadRequest
    ) -> OpenCommentThreadResponse:
        """Execute open thread flow.

        Steps:
        1. Verify the post exists
        2. Subscribe to its comments and apply the first snapshot

        The caller owns the returned session and must close it.

        Raises:
            NotFoundError: If the post doesn't exist
        """
        post_id = PostId(request.post_id)
        post = await self.comment_repository.find_post(post_id)
        if post is None:
            raise NotFoundError("Post", post_id)

        session = CommentThreadSession(
            post_id=post_id,
            user_id=UserId(request.user_id),
            comment_repository=self.comment_repository,
            comment_service=self.comment_service,
            like_service=self.like_service,
            rate_limit_service=self.rate_limit_service,
            settings=self.settings,
            clock=self.clock,
        )
        await session.open()

        return OpenCommentThreadResponse(
            session=session,
            post_author_id=post.author_id,
            comment_count=post.comment_count,
        )
