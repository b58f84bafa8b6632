"""Document store interface."""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from clubhouse.domain.model.document import Document
from clubhouse.domain.repository.subscription import Subscription
from clubhouse.domain.value import FieldFilter, Increment, OrderBy


class DocumentStore(ABC):
    """Schemaless document store with real-time subscriptions.

    Collections are addressed by slash-separated paths such as
    ``posts/{post_id}/comments``. Field values may be plain JSON-compatible
    values or FieldTransform instances (Increment, ArrayUnion, ArrayRemove,
    ServerTimestamp), which are applied atomically per document.

    Implementations live in the infrastructure layer.
    """

    @abstractmethod
    async def create(self, collection_path: str, fields: Mapping[str, Any]) -> str:
        """Create a document with a store-assigned id.

        Args:
            collection_path: Target collection
            fields: Initial fields (transforms allowed)

        Returns:
            The new document's id
        """
        pass

    @abstractmethod
    async def set(
        self, collection_path: str, document_id: str, fields: Mapping[str, Any]
    ) -> None:
        """Create or replace a document with a caller-chosen id.

        Args:
            collection_path: Target collection
            document_id: Document id
            fields: Complete field set (transforms allowed)
        """
        pass

    @abstractmethod
    async def get(self, collection_path: str, document_id: str) -> Optional[Document]:
        """Read a single document.

        Returns:
            The document if it exists, None otherwise
        """
        pass

    @abstractmethod
    async def update(
        self, collection_path: str, document_id: str, changes: Mapping[str, Any]
    ) -> None:
        """Merge changes into an existing document atomically.

        Args:
            collection_path: Target collection
            document_id: Document id
            changes: Field values or transforms to apply

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        pass

    @abstractmethod
    async def delete(self, collection_path: str, document_id: str) -> None:
        """Delete a document. Deleting a missing document is a no-op."""
        pass

    @abstractmethod
    async def subscribe(
        self,
        collection_path: str,
        filters: Sequence[FieldFilter] = (),
        order_by: Sequence[OrderBy] = (),
    ) -> Subscription:
        """Subscribe to the ordered, filtered contents of a collection.

        The first snapshot is delivered immediately; a new one follows every
        change to the collection until the subscription is closed.

        Args:
            collection_path: Collection to watch
            filters: Conditions every delivered document satisfies
            order_by: Sort keys, applied in order

        Returns:
            Subscription handle owned by the caller
        """
        pass

    async def increment_field(
        self, collection_path: str, document_id: str, field: str, delta: int
    ) -> None:
        """Atomically add ``delta`` to a numeric field.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        await self.update(collection_path, document_id, {field: Increment(delta=delta)})
