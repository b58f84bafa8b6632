#!/usr/bin/env python3
"""Watch a post's comment thread and print the tree on every change.

    python scripts/watch_thread.py POST_ID --user USER_ID
    python scripts/watch_thread.py POST_ID --user USER_ID --comment "Great round!"
"""

import argparse
import asyncio
import sys

import logfire

from clubhouse.application.session import CommentThreadSession
from clubhouse.application.usecase.comment import (
    OpenCommentThreadRequest,
    OpenCommentThreadUseCase,
)
from clubhouse.config import Settings
from clubhouse.domain.error import DomainError, RateLimitedError
from clubhouse.domain.service import get_rate_limit_message
from clubhouse.domain.value import ActionKind, CommentId
from clubhouse.util.di.container import create_container
from clubhouse.util.logging import setup_logging
from clubhouse.util.observability import configure_logfire


def render(session: CommentThreadSession) -> str:
    lines = [f"--- post {session.post_id}: {len(session.comments)} comments ---"]
    for comment, level in session.tree.walk():
        marker = " (posting...)" if comment.is_pending else ""
        likes = f" [{comment.like_count} likes]" if comment.like_count else ""
        lines.append(
            f"{'  ' * level}- {comment.author_id}: {comment.content}{likes}{marker}"
        )
    return "\n".join(lines)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Watch a post's comment thread")
    parser.add_argument("post_id")
    parser.add_argument("--user", required=True, help="Viewing user id")
    parser.add_argument("--comment", help="Post this comment after opening")
    parser.add_argument("--reply-to", help="Parent comment id for --comment")
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop after this many seconds (default: run until interrupted)",
    )
    return parser.parse_args(argv)


async def watch(args: argparse.Namespace) -> None:
    container = create_container()
    try:
        async with container() as request_container:
            use_case = await request_container.get(OpenCommentThreadUseCase)
            response = await use_case.execute(
                OpenCommentThreadRequest(post_id=args.post_id, user_id=args.user)
            )
            session = response.session
            session.add_change_listener(lambda _: print(render(session), flush=True))
            session.add_error_listener(
                lambda error: print(f"! {error}", file=sys.stderr, flush=True)
            )
            print(render(session), flush=True)

            try:
                if args.comment:
                    parent_id = CommentId(args.reply_to) if args.reply_to else None
                    try:
                        await session.submit_create(args.comment, parent_id)
                    except RateLimitedError as e:
                        print(
                            get_rate_limit_message(ActionKind.COMMENT, e.remaining_seconds),
                            file=sys.stderr,
                        )
                    except DomainError as e:
                        print(f"! {e}", file=sys.stderr)

                if args.duration is None:
                    await asyncio.Event().wait()
                else:
                    await asyncio.sleep(args.duration)
            finally:
                await session.close()
    finally:
        await container.close()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = Settings()
    setup_logging(settings)
    configure_logfire(settings)

    try:
        asyncio.run(watch(args))
    except KeyboardInterrupt:
        logfire.info("Thread watcher stopped", post_id=args.post_id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
