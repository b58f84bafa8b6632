"""Mappers for converting between store documents and domain models.

Documents use the camelCase field names shared with the other clients of
the store (the mobile app and notification triggers).
"""

from typing import Any, Dict

import logfire

from clubhouse.domain.model import Comment, CommentLike, Document, Post
from clubhouse.domain.value import CommentId, LikeId, PostId, UserId

POSTS_COLLECTION = "posts"
COMMENT_LIKES_COLLECTION = "comment_likes"


def comments_collection(post_id: PostId) -> str:
    """Collection path holding a post's comments."""
    return f"{POSTS_COLLECTION}/{post_id}/comments"


def comment_to_fields(comment: Comment) -> Dict[str, Any]:
    """Convert a new Comment to document fields.

    Args:
        comment: Comment domain model

    Returns:
        Fields suitable for DocumentStore.create
    """
    return {
        "postId": comment.post_id,
        "userId": comment.author_id,
        "content": comment.content,
        "parentCommentId": comment.parent_id,
        "parentCommentAuthorId": comment.parent_author_id,
        "postAuthorId": comment.post_author_id,
        "depth": comment.depth,
        "replyCount": comment.reply_count,
        "likes": comment.like_count,
        "likedBy": list(comment.liked_by_user_ids),
        "clientToken": comment.client_token,
        "isDeleted": False,
        "createdAt": comment.created_at,
        "updatedAt": comment.updated_at,
        "deletedAt": None,
    }


def document_to_comment(document: Document, post_id: PostId) -> Comment:
    """Convert a comment document to a Comment domain model.

    A like counter that disagrees with the liker list is replaced by the
    list's size; a negative reply counter is clamped to 0.

    Args:
        document: Store document
        post_id: Post the comments collection belongs to

    Returns:
        Confirmed Comment domain model
    """
    fields = document.fields
    liked_by = tuple(dict.fromkeys(fields.get("likedBy") or []))
    like_count = fields.get("likes") or 0
    if like_count != len(liked_by):
        logfire.warn(
            "Like counter out of step with likers",
            comment_id=document.id,
            likes=like_count,
            likers=len(liked_by),
        )
    reply_count = fields.get("replyCount") or 0

    return Comment(
        id=CommentId(document.id),
        post_id=PostId(fields.get("postId") or post_id),
        author_id=UserId(fields["userId"]),
        content=fields["content"],
        parent_id=fields.get("parentCommentId"),
        parent_author_id=fields.get("parentCommentAuthorId"),
        post_author_id=fields.get("postAuthorId"),
        depth=fields.get("depth") or 0,
        reply_count=max(0, reply_count),
        like_count=len(liked_by),
        liked_by_user_ids=liked_by,
        is_pending=False,
        client_token=fields.get("clientToken"),
        created_at=fields.get("createdAt") or document.create_time,
        updated_at=fields.get("updatedAt"),
        deleted_at=fields.get("deletedAt"),
    )


def like_to_fields(like: CommentLike) -> Dict[str, Any]:
    """Convert a CommentLike to document fields."""
    return {
        "userId": like.user_id,
        "commentId": like.comment_id,
        "commentAuthorId": like.comment_author_id,
        "postId": like.post_id,
        "createdAt": like.created_at,
    }


def document_to_like(document: Document) -> CommentLike:
    """Convert a like document to a CommentLike domain model."""
    fields = document.fields
    return CommentLike(
        id=LikeId(document.id),
        user_id=UserId(fields["userId"]),
        comment_id=CommentId(fields["commentId"]),
        comment_author_id=UserId(fields["commentAuthorId"]),
        post_id=PostId(fields["postId"]),
        created_at=fields.get("createdAt") or document.create_time,
    )


def post_to_fields(post: Post) -> Dict[str, Any]:
    """Convert a Post to document fields."""
    return {
        "userId": post.author_id,
        "content": post.content,
        "comments": post.comment_count,
        "createdAt": post.created_at,
    }


def document_to_post(document: Document) -> Post:
    """Convert a post document to a Post domain model."""
    fields = document.fields
    return Post(
        id=PostId(document.id),
        author_id=UserId(fields["userId"]),
        content=fields.get("content") or "",
        comment_count=fields.get("comments") or 0,
        created_at=fields.get("createdAt") or document.create_time,
    )
