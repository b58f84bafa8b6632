"""Domain services."""

from .base import Service
from .comment_service import CommentService, validate_comment_text
from .counter_service import CounterService
from .like_service import LikeService
from .rate_limit_service import RateLimitService, get_rate_limit_message
from .reconciliation import ReconcileResult, match_pending, reconcile
from .thread_builder import build_tree, compute_depths, find_depth_mismatches

__all__ = [
    "CommentService",
    "CounterService",
    "LikeService",
    "RateLimitService",
    "ReconcileResult",
    "Service",
    "build_tree",
    "compute_depths",
    "find_depth_mismatches",
    "get_rate_limit_message",
    "match_pending",
    "reconcile",
    "validate_comment_text",
]
