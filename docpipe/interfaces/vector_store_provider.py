"""Abstract base class for vector-store service providers.

Defines the contract for upserting embedded chunks into a namespaced index
and querying nearest neighbours.  The process step writes one namespace per
document (``document-<id>``); see :func:`docpipe.models.vector.namespace_for`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from docpipe.models.vector import QueryMatch, Vector


# Concrete implementation: PineconeVectorStore (docpipe/providers/vector_store/)
class IVectorStoreProvider(ABC):
    """Contract for vector-store services used by the process step.

    All network methods are async so the store call does not block the
    event loop while other requests are served.
    """

    @abstractmethod
    async def upsert(self, vectors: list[Vector], namespace: str) -> int:
        """Insert-or-replace *vectors* in *namespace* as a single batch.

        The batch succeeds or fails as a whole; there is no partial upsert.

        Returns
        -------
        int
            Number of vectors the store reports as upserted.

        Raises
        ------
        docpipe.utils.errors.NoVectorsError
            If *vectors* is empty.  No request is sent.
        docpipe.utils.errors.StoreError
            On any non-success response or transport failure.
        """

    @abstractmethod
    async def query(
        self,
        vector: list[float],
        top_k: int = 10,
        namespace: str = "",
        filter: dict[str, Any] | None = None,
    ) -> list[QueryMatch]:
        """Return the *top_k* nearest matches to *vector* in *namespace*.

        Matches are returned in the store's ranking order (best first).

        Raises
        ------
        docpipe.utils.errors.InvalidQueryError
            If *vector* is empty.
        docpipe.utils.errors.StoreError
            On any non-success response or transport failure.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"pinecone"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials and index location are configured."""
