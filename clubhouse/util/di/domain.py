"""Domain layer DI providers."""

from dishka import Scope, provide

from clubhouse.config import RateLimitSettings
from clubhouse.domain.repository import CommentRepository, RateLimitRepository
from clubhouse.domain.service import (
    CommentService,
    CounterService,
    LikeService,
    RateLimitService,
)
from clubhouse.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository lifecycle.
    """

    scope = Scope.REQUEST

    @provide
    def get_counter_service(
        self, comment_repository: CommentRepository
    ) -> CounterService:
        """Provide counter maintenance service."""
        return CounterService(comment_repository=comment_repository)

    @provide
    def get_comment_service(
        self, comment_repository: CommentRepository, counter_service: CounterService
    ) -> CommentService:
        """Provide comment domain service."""
        return CommentService(
            comment_repository=comment_repository, counter_service=counter_service
        )

    @provide
    def get_like_service(self, comment_repository: CommentRepository) -> LikeService:
        """Provide like domain service."""
        return LikeService(comment_repository=comment_repository)

    @provide
    def get_rate_limit_service(
        self,
        rate_limit_repository: RateLimitRepository,
        settings: RateLimitSettings,
    ) -> RateLimitService:
        """Provide rate limit domain service."""
        return RateLimitService(
            rate_limit_repository=rate_limit_repository, settings=settings
        )
