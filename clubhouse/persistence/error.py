"""Persistence layer errors."""


class PersistenceError(Exception):
    """Base persistence error."""

    pass


class DocumentNotFoundError(PersistenceError):
    """Raised when updating a document that does not exist."""

    def __init__(self, collection_path: str, document_id: str):
        self.collection_path = collection_path
        self.document_id = document_id
        super().__init__(f"Document not found: {collection_path}/{document_id}")
