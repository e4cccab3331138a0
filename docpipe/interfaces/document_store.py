"""Abstract base class for Document persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod

from docpipe.models.document import Document, DocumentStatus


# Concrete implementation: SQLiteDocumentStore (docpipe/providers/document_store/)
class IDocumentStore(ABC):
    """Contract for storing and loading :class:`Document` records."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create backing tables if they do not exist.  Idempotent."""

    @abstractmethod
    async def insert(self, document: Document) -> Document:
        """Persist a new document and return it."""

    @abstractmethod
    async def get(self, document_id: str) -> Document | None:
        """Return the document with *document_id*, or ``None``."""

    @abstractmethod
    async def update_status(
        self,
        document_id: str,
        status: DocumentStatus,
        expected_status: DocumentStatus,
    ) -> Document:
        """Set *status* only if the stored status still equals *expected_status*.

        Raises
        ------
        docpipe.utils.errors.DocumentNotFoundError
            If no document has *document_id*.
        docpipe.utils.errors.StatusConflictError
            If the stored status differs from *expected_status*, or
            if the move from *expected_status* to *status* is not a legal
            transition.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"sqlite_documents"``."""
