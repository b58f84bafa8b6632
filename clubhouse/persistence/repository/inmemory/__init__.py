"""In-memory repository implementations for testing."""

from .document_store import InMemoryDocumentStore
from .rate_limit import InMemoryRateLimitRepository

__all__ = [
    "InMemoryDocumentStore",
    "InMemoryRateLimitRepository",
]
