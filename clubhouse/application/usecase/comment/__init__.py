"""Comment use cases."""

from .open_thread import (
    OpenCommentThreadRequest,
    OpenCommentThreadResponse,
    OpenCommentThreadUseCase,
)

__all__ = [
    "OpenCommentThreadRequest",
    "OpenCommentThreadResponse",
    "OpenCommentThreadUseCase",
]
