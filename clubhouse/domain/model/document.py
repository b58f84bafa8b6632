"""Raw document store records."""

from datetime import datetime
from typing import Any

from pydantic import Field

from clubhouse.domain.model.common import DomainModel


class Document(DomainModel):
    """A schemaless record in a document store collection."""

    id: str
    fields: dict[str, Any] = Field(default_factory=dict)
    create_time: datetime = Field(default_factory=datetime.now)
    update_time: datetime = Field(default_factory=datetime.now)


class Snapshot(DomainModel):
    """Ordered contents of a subscribed collection at one point in time.

    revision increases with every change the store has applied to the
    collection, so consumers can tell a newer snapshot from an older one.
    """

    collection_path: str
    revision: int
    documents: tuple[Document, ...] = ()
