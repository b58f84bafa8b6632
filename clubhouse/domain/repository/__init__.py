"""Repository interfaces for clubhouse domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the infrastructure layer.
"""

from clubhouse.domain.repository.comment import CommentRepository, CommentSubscription
from clubhouse.domain.repository.document_store import DocumentStore
from clubhouse.domain.repository.rate_limit import RateLimitRepository
from clubhouse.domain.repository.subscription import Subscription

__all__ = [
    "CommentRepository",
    "CommentSubscription",
    "DocumentStore",
    "RateLimitRepository",
    "Subscription",
]
