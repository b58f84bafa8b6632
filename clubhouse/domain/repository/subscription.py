"""Subscription handle for real-time collection snapshots."""

import asyncio
from collections.abc import Callable
from typing import Optional

from clubhouse.domain.model.document import Snapshot


class Subscription:
    """Explicit, cancellable handle on a collection's snapshot stream.

    Iterate it with ``async for`` to receive snapshots; each snapshot is the
    full ordered result of the subscribed query. When several snapshots
    queue up before the consumer runs, only the newest is delivered.

    Use it as an async context manager, or call ``close()``, to detach it
    from the store deterministically. Iteration ends once closed.
    """

    def __init__(
        self,
        collection_path: str,
        on_close: Optional[Callable[["Subscription"], None]] = None,
    ) -> None:
        self.collection_path = collection_path
        self._queue: asyncio.Queue[Snapshot | BaseException | None] = asyncio.Queue()
        self._on_close = on_close
        self._closed = False
        self._last_revision = -1

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, snapshot: Snapshot) -> None:
        """Queue a snapshot; stale or post-close snapshots are ignored."""
        if self._closed or snapshot.revision <= self._last_revision:
            return
        self._last_revision = snapshot.revision
        self._queue.put_nowait(snapshot)

    def fail(self, error: BaseException) -> None:
        """Deliver an error to the consumer; it is raised from iteration."""
        if not self._closed:
            self._queue.put_nowait(error)

    def close(self) -> None:
        """Detach from the store and end iteration. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)
        if self._on_close is not None:
            self._on_close(self)

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> Snapshot:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        # Coalesce to the newest queued snapshot
        while isinstance(item, Snapshot) and not self._queue.empty():
            item = self._queue.get_nowait()
        if item is None:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()
