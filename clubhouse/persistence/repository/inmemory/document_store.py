"""In-memory document store for testing and local runs."""

import copy
from collections import defaultdict
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
from uuid import uuid4

from clubhouse.domain.model.document import Document, Snapshot
from clubhouse.domain.repository import DocumentStore, Subscription
from clubhouse.domain.value import FieldFilter, OrderBy
from clubhouse.persistence.error import DocumentNotFoundError
from clubhouse.persistence.query import apply_changes, evaluate


@dataclass
class _Watch:
    subscription: Subscription
    filters: tuple[FieldFilter, ...]
    order_by: tuple[OrderBy, ...]


class InMemoryDocumentStore(DocumentStore):
    """In-memory implementation of DocumentStore.

    Every write publishes a fresh snapshot to the collection's
    subscriptions synchronously, so delivery order follows write order.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock
        self._collections: dict[str, dict[str, Document]] = defaultdict(dict)
        self._revisions: dict[str, int] = defaultdict(int)
        self._watches: dict[str, list[_Watch]] = defaultdict(list)

    def _snapshot(self, collection_path: str, watch: _Watch) -> Snapshot:
        documents = evaluate(
            self._collections[collection_path].values(),
            watch.filters,
            watch.order_by,
        )
        return Snapshot(
            collection_path=collection_path,
            revision=self._revisions[collection_path],
            documents=tuple(copy.deepcopy(doc) for doc in documents),
        )

    def _changed(self, collection_path: str) -> None:
        self._revisions[collection_path] += 1
        for watch in list(self._watches[collection_path]):
            watch.subscription.publish(self._snapshot(collection_path, watch))

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
        existing = self._collections[collection_path].get(document_id)
        self._collections[collection_path][document_id] = Document(
            id=document_id,
            fields=apply_changes({}, copy.deepcopy(dict(fields)), now),
            create_time=existing.create_time if existing else now,
            update_time=now,
        )
        self._changed(collection_path)

    async def get(self, collection_path: str, document_id: str) -> Optional[Document]:
        """Read a single document."""
        document = self._collections[collection_path].get(document_id)
        return copy.deepcopy(document) if document else None

    async def update(
        self, collection_path: str, document_id: str, changes: Mapping[str, Any]
    ) -> None:
        """Merge changes into an existing document."""
        existing = self._collections[collection_path].get(document_id)
        if existing is None:
            raise DocumentNotFoundError(collection_path, document_id)
        now = self._clock()
        self._collections[collection_path][document_id] = existing.model_copy(
            update={
                "fields": apply_changes(existing.fields, copy.deepcopy(dict(changes)), now),
                "update_time": now,
            }
        )
        self._changed(collection_path)

    async def delete(self, collection_path: str, document_id: str) -> None:
        """Delete a document if present."""
        if self._collections[collection_path].pop(document_id, None) is not None:
            self._changed(collection_path)

    async def subscribe(
        self,
        collection_path: str,
        filters: Sequence[FieldFilter] = (),
        order_by: Sequence[OrderBy] = (),
    ) -> Subscription:
        """Subscribe to a collection; the current contents arrive first."""
        subscription = Subscription(collection_path, on_close=self._detach)
        watch = _Watch(subscription, tuple(filters), tuple(order_by))
        self._watches[collection_path].append(watch)
        subscription.publish(self._snapshot(collection_path, watch))
        return subscription

    def _detach(self, subscription: Subscription) -> None:
        watches = self._watches[subscription.collection_path]
        self._watches[subscription.collection_path] = [
            w for w in watches if w.subscription is not subscription
        ]

    def subscriber_count(self, collection_path: str) -> int:
        """Number of open subscriptions on a collection."""
        return len(self._watches[collection_path])
