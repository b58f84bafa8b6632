"""PostgreSQL implementation of the document store."""

import asyncio
from collections.abc import Callable, Mapping, Sequence
from datetime import date, datetime
from typing import Any, Optional
from uuid import uuid4

import logfire
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clubhouse.domain.model.document import Document, Snapshot
from clubhouse.domain.repository import DocumentStore, Subscription
from clubhouse.domain.value import FieldFilter, OrderBy
from clubhouse.persistence.database import transaction
from clubhouse.persistence.error import DocumentNotFoundError
from clubhouse.persistence.query import apply_changes, evaluate
from clubhouse.persistence.tables import collection_revisions_table, documents_table


def _to_json(value: Any) -> Any:
    """Make field values JSONB-safe; datetimes become ISO strings."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {k: _to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json(v) for v in value]
    return value


class PostgresDocumentStore(DocumentStore):
    """DocumentStore over a single JSONB table.

    Writes run in their own transaction and bump the collection's revision.
    Subscriptions poll the revision and re-read the collection when it
    moves; writes made through this instance wake them immediately.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        poll_interval_seconds: float = 1.0,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize store.

        Args:
            session_factory: SQLAlchemy async session factory
            poll_interval_seconds: Subscription re-check interval
            clock: Source of write timestamps
        """
        self.session_factory = session_factory
        self.poll_interval_seconds = poll_interval_seconds
        self._clock = clock
        self._wakeups: dict[str, set[asyncio.Event]] = {}
        self._pollers: dict[Subscription, asyncio.Task] = {}

    async def _bump_revision(self, session: AsyncSession, collection_path: str) -> None:
        stmt = (
            insert(collection_revisions_table)
            .values(collection=collection_path, revision=1)
            .on_conflict_do_update(
                index_elements=[collection_revisions_table.c.collection],
                set_={"revision": collection_revisions_table.c.revision + 1},
            )
        )
        await session.execute(stmt)

    def _wake(self, collection_path: str) -> None:
        for event in self._wakeups.get(collection_path, ()):
            event.set()

    async def create(self, collection_path: str, fields: Mapping[str, Any]) -> str:
        """Create a document with a generated id."""
        document_id = uuid4().hex
        await self.set(collection_path, document_id, fields)
        return document_id

    async def set(
        self, collection_path: str, document_id: str, fields: Mapping[str, Any]
    ) -> None:
        """Create or replace a document."""
        now = self._clock()
        values = _to_json(apply_changes({}, fields, now))
        async with transaction(self.session_factory) as session:
            stmt = (
                insert(documents_table)
                .values(
                    collection=collection_path,
                    id=document_id,
                    fields=values,
                    create_time=now,
                    update_time=now,
                )
                .on_conflict_do_update(
                    index_elements=[documents_table.c.collection, documents_table.c.id],
                    set_={"fields": values, "update_time": now},
                )
            )
            await session.execute(stmt)
            await self._bump_revision(session, collection_path)
        self._wake(collection_path)

    async def get(self, collection_path: str, document_id: str) -> Optional[Document]:
        """Read a single document."""
        stmt = select(documents_table).where(
            documents_table.c.collection == collection_path,
            documents_table.c.id == document_id,
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            row = result.fetchone()
        return self._row_to_document(row._asdict()) if row else None

    async def update(
        self, collection_path: str, document_id: str, changes: Mapping[str, Any]
    ) -> None:
        """Merge changes under a row lock so transforms are atomic."""
        now = self._clock()
        async with transaction(self.session_factory) as session:
            stmt = (
                select(documents_table.c.fields)
                .where(
                    documents_table.c.collection == collection_path,
                    documents_table.c.id == document_id,
                )
                .with_for_update()
            )
            current = (await session.execute(stmt)).scalar_one_or_none()
            if current is None:
                raise DocumentNotFoundError(collection_path, document_id)

            merged = _to_json(apply_changes(current, changes, now))
            await session.execute(
                documents_table.update()
                .where(
                    documents_table.c.collection == collection_path,
                    documents_table.c.id == document_id,
                )
                .values(fields=merged, update_time=now)
            )
            await self._bump_revision(session, collection_path)
        self._wake(collection_path)

    async def delete(self, collection_path: str, document_id: str) -> None:
        """Delete a document if present."""
        async with transaction(self.session_factory) as session:
            result = await session.execute(
                documents_table.delete().where(
                    documents_table.c.collection == collection_path,
                    documents_table.c.id == document_id,
                )
            )
            if result.rowcount:
                await self._bump_revision(session, collection_path)
        self._wake(collection_path)

    async def _read_revision(self, collection_path: str) -> int:
        stmt = select(collection_revisions_table.c.revision).where(
            collection_revisions_table.c.collection == collection_path
        )
        async with self.session_factory() as session:
            return (await session.execute(stmt)).scalar_one_or_none() or 0

    async def _read_snapshot(
        self,
        collection_path: str,
        filters: Sequence[FieldFilter],
        order_by: Sequence[OrderBy],
    ) -> Snapshot:
        async with transaction(self.session_factory) as session:
            revision = (
                await session.execute(
                    select(collection_revisions_table.c.revision).where(
                        collection_revisions_table.c.collection == collection_path
                    )
                )
            ).scalar_one_or_none() or 0
            rows = (
                await session.execute(
                    select(documents_table).where(
                        documents_table.c.collection == collection_path
                    )
                )
            ).fetchall()
        documents = [self._row_to_document(row._asdict()) for row in rows]
        return Snapshot(
            collection_path=collection_path,
            revision=revision,
            documents=tuple(evaluate(documents, filters, order_by)),
        )

    async def subscribe(
        self,
        collection_path: str,
        filters: Sequence[FieldFilter] = (),
        order_by: Sequence[OrderBy] = (),
    ) -> Subscription:
        """Subscribe to a collection; the current contents arrive first."""
        subscription = Subscription(collection_path, on_close=self._detach)
        snapshot = await self._read_snapshot(collection_path, filters, order_by)
        subscription.publish(snapshot)

        wakeup = asyncio.Event()
        self._wakeups.setdefault(collection_path, set()).add(wakeup)
        self._pollers[subscription] = asyncio.create_task(
            self._poll(subscription, wakeup, tuple(filters), tuple(order_by), snapshot.revision)
        )
        return subscription

    async def _poll(
        self,
        subscription: Subscription,
        wakeup: asyncio.Event,
        filters: tuple[FieldFilter, ...],
        order_by: tuple[OrderBy, ...],
        revision: int,
    ) -> None:
        collection_path = subscription.collection_path
        try:
            while not subscription.closed:
                try:
                    await asyncio.wait_for(wakeup.wait(), self.poll_interval_seconds)
                except asyncio.TimeoutError:
                    pass
                wakeup.clear()

                if await self._read_revision(collection_path) <= revision:
                    continue
                snapshot = await self._read_snapshot(collection_path, filters, order_by)
                revision = snapshot.revision
                subscription.publish(snapshot)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logfire.error(
                "Subscription polling failed",
                collection=collection_path,
                error=str(e),
            )
            subscription.fail(e)
        finally:
            self._wakeups.get(collection_path, set()).discard(wakeup)

    def _detach(self, subscription: Subscription) -> None:
        task = self._pollers.pop(subscription, None)
        if task is not None:
            task.cancel()

    @staticmethod
    def _row_to_document(row: dict[str, Any]) -> Document:
        return Document(
            id=row["id"],
            fields=row["fields"] or {},
            create_time=row["create_time"],
            update_time=row["update_time"],
        )
