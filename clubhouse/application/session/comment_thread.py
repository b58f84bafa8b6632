"""Optimistic merge layer for one post's comment thread.

A session owns two buffers: confirmed records from the live subscription
and pending placeholders for creates that have not been confirmed yet.
They are merged by ``reconcile`` on every snapshot and every local change;
``comments`` and ``tree`` are the merged view and are never mutated from
anywhere else.
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Optional, TypeVar
from uuid import uuid4

import logfire

from clubhouse.config import CommentSettings
from clubhouse.domain.error import (
    BusinessRuleViolationError,
    DomainError,
    NotAuthorizedError,
    NotFoundError,
    RateLimitedError,
    ReconciliationMismatchError,
    WriteFailedError,
)
from clubhouse.domain.model.comment import Comment
from clubhouse.domain.model.thread import ThreadTree
from clubhouse.domain.repository import CommentRepository, CommentSubscription
from clubhouse.domain.service import (
    CommentService,
    LikeService,
    RateLimitService,
    build_tree,
    reconcile,
    validate_comment_text,
)
from clubhouse.domain.value import ActionKind, CommentId, PostId, UserId
from clubhouse.domain.value.identifiers import new_pending_comment_id

T = TypeVar("T")

ChangeListener = Callable[[list[Comment]], None]
ErrorListener = Callable[[Exception], None]


class CommentThreadSession:
    """Live comment thread for one viewer on one post.

    Open it with ``await session.open()`` or ``async with session:``; the
    subscription is torn down on ``close()``. All mutations go through
    ``submit_create``, ``submit_edit``, ``submit_delete`` and
    ``toggle_like``. Failures are raised to the caller and also delivered
    to error listeners.
    """

    def __init__(
        self,
        post_id: PostId,
        user_id: UserId,
        comment_repository: CommentRepository,
        comment_service: CommentService,
        like_service: LikeService,
        rate_limit_service: RateLimitService,
        settings: CommentSettings,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize a thread session.

        Args:
            post_id: Post whose comments are shown
            user_id: Viewing user; the author of every local action
            comment_repository: Source of the live subscription
            comment_service: Confirmed comment writes
            like_service: Like toggling
            rate_limit_service: Cooldown gate for new comments
            settings: Timeouts and rollback policy
            clock: Source of placeholder timestamps
        """
        self.post_id = post_id
        self.user_id = user_id
        self.comment_repository = comment_repository
        self.comment_service = comment_service
        self.like_service = like_service
        self.rate_limit_service = rate_limit_service
        self.settings = settings
        self.clock = clock

        self.comments: list[Comment] = []
        self.tree: ThreadTree = ThreadTree()

        self._confirmed: list[Comment] = []
        self._pending: list[Comment] = []
        self._change_listeners: list[ChangeListener] = []
        self._error_listeners: list[ErrorListener] = []
        self._changed = asyncio.Event()
        self._subscription: Optional[CommentSubscription] = None
        self._listener_task: Optional[asyncio.Task] = None
        self._watchdogs: dict[CommentId, asyncio.Task] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._subscription is not None and not self._subscription.closed

    @property
    def pending(self) -> list[Comment]:
        return list(self._pending)

    async def open(self) -> "CommentThreadSession":
        """Subscribe to the post's comments and apply the first snapshot."""
        if self.is_open:
            return self
        with logfire.span(
            "comment_thread.open", post_id=self.post_id, user_id=self.user_id
        ):
            self._subscription = await self.comment_repository.subscribe(self.post_id)
            first = await self._subscription.__anext__()
            self.on_snapshot(first)
            self._listener_task = asyncio.create_task(self._listen(self._subscription))
            logfire.info(
                "Comment thread opened", post_id=self.post_id, count=len(first)
            )
        return self

    async def close(self) -> None:
        """Detach the subscription and stop reconciliation timers."""
        if self._subscription is not None:
            self._subscription.close()
        if self._listener_task is not None:
            await self._listener_task
            self._listener_task = None
        watchdogs = list(self._watchdogs.values())
        self._watchdogs.clear()
        for task in watchdogs:
            task.cancel()
        await asyncio.gather(*watchdogs, return_exceptions=True)
        logfire.info("Comment thread closed", post_id=self.post_id)

    async def __aenter__(self) -> "CommentThreadSession":
        return await self.open()

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _listen(self, subscription: CommentSubscription) -> None:
        try:
            async for comments in subscription:
                self.on_snapshot(comments)
        except Exception as e:
            logfire.error(
                "Comment subscription failed", post_id=self.post_id, error=str(e)
            )
            self._emit_error(e)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_change_listener(self, listener: ChangeListener) -> Callable[[], None]:
        """Call ``listener(comments)`` after every change; returns a remover."""
        self._change_listeners.append(listener)
        return lambda: self._change_listeners.remove(listener)

    def add_error_listener(self, listener: ErrorListener) -> Callable[[], None]:
        """Call ``listener(error)`` for every failed action; returns a remover."""
        self._error_listeners.append(listener)
        return lambda: self._error_listeners.remove(listener)

    async def wait_for(
        self,
        predicate: Callable[["CommentThreadSession"], bool],
        timeout: float = 5.0,
    ) -> None:
        """Wait until ``predicate(self)`` holds after some change.

        Raises:
            TimeoutError: If it does not hold within ``timeout`` seconds
        """

        async def _until() -> None:
            while not predicate(self):
                await self._changed.wait()

        await asyncio.wait_for(_until(), timeout)

    def _publish(self) -> None:
        self.comments = [*self._confirmed, *self._pending]
        self.tree = build_tree(self.comments)
        for listener in list(self._change_listeners):
            listener(list(self.comments))
        changed, self._changed = self._changed, asyncio.Event()
        changed.set()

    def _emit_error(self, error: Exception) -> None:
        for listener in list(self._error_listeners):
            listener(error)

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def on_snapshot(self, server_comments: list[Comment]) -> None:
        """Replace the confirmed buffer and settle matching placeholders.

        A placeholder is dropped in the same change that admits its
        confirmed record.
        """
        result = reconcile(server_comments, self._pending)
        self._confirmed = list(server_comments)
        self._pending = result.pending
        for pending_id, record in result.matched.items():
            watchdog = self._watchdogs.pop(pending_id, None)
            if watchdog is not None:
                watchdog.cancel()
            logfire.debug(
                "Pending comment confirmed", pending_id=pending_id, comment_id=record.id
            )
        self._publish()

    def _drop_pending(self, pending_id: CommentId) -> bool:
        before = len(self._pending)
        self._pending = [p for p in self._pending if p.id != pending_id]
        return len(self._pending) != before

    async def _reconciliation_watchdog(self, pending_id: CommentId) -> None:
        window = self.settings.reconciliation_window_seconds
        await asyncio.sleep(window)
        self._watchdogs.pop(pending_id, None)
        if self._drop_pending(pending_id):
            logfire.warn(
                "Pending comment never confirmed",
                pending_id=pending_id,
                post_id=self.post_id,
                waited_seconds=window,
            )
            self._publish()
            self._emit_error(ReconciliationMismatchError(pending_id, window))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def _write(
        self,
        operation: str,
        write: Awaitable[T],
        rollback: Optional[Callable[[], None]],
        **attributes,
    ) -> T:
        try:
            # On timeout the write is cancelled and its own cleanup awaited
            return await asyncio.wait_for(write, self.settings.write_timeout_seconds)
        except Exception as e:
            if rollback is not None:
                rollback()
                self._publish()
            error = e if isinstance(e, DomainError) else WriteFailedError(operation, e)
            logfire.error(
                "Comment write failed",
                operation=operation,
                post_id=self.post_id,
                user_id=self.user_id,
                rolled_back=rollback is not None,
                error=str(e) or type(e).__name__,
                **attributes,
            )
            self._emit_error(error)
            if error is e:
                raise
            raise error from e

    def _find_confirmed(self, comment_id: CommentId) -> Comment:
        for comment in self._confirmed:
            if comment.id == comment_id:
                return comment
        if any(p.id == comment_id for p in self._pending):
            raise BusinessRuleViolationError("Comment is still being posted")
        raise NotFoundError("Comment", comment_id)

    def _find_own(self, comment_id: CommentId) -> Comment:
        comment = self._find_confirmed(comment_id)
        if comment.author_id != self.user_id:
            raise NotAuthorizedError("comment", comment_id, self.user_id)
        return comment

    def _replace_confirmed(self, comment: Comment) -> None:
        self._confirmed = [comment if c.id == comment.id else c for c in self._confirmed]

    def _mutation_rollback(
        self, restore: Callable[[], None]
    ) -> Optional[Callable[[], None]]:
        return restore if self.settings.rollback_failed_mutations else None

    async def submit_create(
        self, content: str, parent_id: Optional[CommentId] = None
    ) -> Comment:
        """Post a comment or reply, showing it immediately as pending.

        Args:
            content: Comment text
            parent_id: Comment being replied to (None for top-level)

        Returns:
            The confirmed comment as written

        Raises:
            ValidationError: If the text is empty or too long
            RateLimitedError: If the user commented within the cooldown
            NotFoundError: If the parent is not in this thread
            WriteFailedError: If the write failed or timed out
        """
        text = validate_comment_text(content)

        decision = await self.rate_limit_service.check_rate_limit(
            self.user_id, ActionKind.COMMENT
        )
        if not decision.allowed:
            raise RateLimitedError(ActionKind.COMMENT.value, decision.remaining_seconds)

        depth = 0
        parent_author_id = None
        if parent_id is not None:
            parent = self._find_confirmed(parent_id)
            depth = parent.depth + 1
            parent_author_id = parent.author_id

        placeholder = Comment(
            id=new_pending_comment_id(),
            post_id=self.post_id,
            author_id=self.user_id,
            content=text,
            parent_id=parent_id,
            parent_author_id=parent_author_id,
            depth=depth,
            is_pending=True,
            client_token=uuid4().hex,
            created_at=self.clock(),
        )
        self._pending.append(placeholder)
        self._publish()

        saved = await self._write(
            "create",
            self.comment_service.create_comment(
                post_id=self.post_id,
                author_id=self.user_id,
                text=text,
                parent_id=parent_id,
                client_token=placeholder.client_token,
            ),
            rollback=lambda: self._drop_pending(placeholder.id),
            pending_id=placeholder.id,
        )

        try:
            await self.rate_limit_service.update_rate_limit_timestamp(
                self.user_id, ActionKind.COMMENT
            )
        except Exception as e:
            logfire.warn(
                "Rate limit timestamp not recorded",
                user_id=self.user_id,
                error=str(e),
            )

        if any(p.id == placeholder.id for p in self._pending):
            self._watchdogs[placeholder.id] = asyncio.create_task(
                self._reconciliation_watchdog(placeholder.id)
            )
        return saved

    async def submit_edit(self, comment_id: CommentId, new_content: str) -> Comment:
        """Replace the text of one of the viewer's confirmed comments.

        Edits are not rate limited.

        Raises:
            ValidationError: If the text is empty or too long
            NotFoundError: If the comment is not in this thread
            NotAuthorizedError: If the viewer is not the author
            WriteFailedError: If the write failed or timed out
        """
        text = validate_comment_text(new_content)
        previous = self._find_own(comment_id)

        self._replace_confirmed(previous.with_content(text, updated_at=self.clock()))
        self._publish()

        return await self._write(
            "edit",
            self.comment_service.update_content(
                self.post_id, comment_id, self.user_id, text
            ),
            rollback=self._mutation_rollback(lambda: self._replace_confirmed(previous)),
            comment_id=comment_id,
        )

    async def submit_delete(self, comment_id: CommentId) -> None:
        """Delete one of the viewer's confirmed comments.

        The comment disappears locally at once; reply and post counters are
        decremented by the write.

        Raises:
            NotFoundError: If the comment is not in this thread
            NotAuthorizedError: If the viewer is not the author
            WriteFailedError: If the write failed or timed out
        """
        previous = self._find_own(comment_id)
        index = self._confirmed.index(previous)

        def restore() -> None:
            if all(c.id != comment_id for c in self._confirmed):
                self._confirmed.insert(min(index, len(self._confirmed)), previous)

        self._confirmed = [c for c in self._confirmed if c.id != comment_id]
        self._publish()

        await self._write(
            "delete",
            self.comment_service.delete_comment(self.post_id, comment_id, self.user_id),
            rollback=self._mutation_rollback(restore),
            comment_id=comment_id,
        )

    async def toggle_like(self, comment_id: CommentId) -> bool:
        """Like or unlike a confirmed comment as the viewer.

        Returns:
            True if the comment is now liked by the viewer

        Raises:
            NotFoundError: If the comment is not in this thread
            WriteFailedError: If the write failed or timed out
        """
        previous = self._find_confirmed(comment_id)

        self._replace_confirmed(previous.with_like_toggled(self.user_id))
        self._publish()

        return await self._write(
            "like",
            self.like_service.toggle_like(self.post_id, comment_id, self.user_id),
            rollback=self._mutation_rollback(lambda: self._replace_confirmed(previous)),
            comment_id=comment_id,
        )
