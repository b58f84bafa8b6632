"""Repository implementations."""

from .comment import DocumentCommentRepository
from .document_store import PostgresDocumentStore
from .rate_limit import PostgresRateLimitRepository

__all__ = [
    "DocumentCommentRepository",
    "PostgresDocumentStore",
    "PostgresRateLimitRepository",
]
