"""Application layer DI providers."""

from dishka import Scope, provide

from clubhouse.application.usecase.comment import OpenCommentThreadUseCase
from clubhouse.config import CommentSettings
from clubhouse.domain.repository import CommentRepository
from clubhouse.domain.service import CommentService, LikeService, RateLimitService
from clubhouse.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Comment use cases
    @provide(scope=Scope.REQUEST)
    def get_open_comment_thread_use_case(
        self,
        comment_repository: CommentRepository,
        comment_service: CommentService,
        like_service: LikeService,
        rate_limit_service: RateLimitService,
        settings: CommentSettings,
    ) -> OpenCommentThreadUseCase:
        """Provide open comment thread use case."""
        return OpenCommentThreadUseCase(
            comment_repository=comment_repository,
            comment_service=comment_service,
            like_service=like_service,
            rate_limit_service=rate_limit_service,
            settings=settings,
        )
