"""Abstract base class for text-embedding service providers.

Defines the contract for turning chunk text into embedding vectors.  One
concrete class exists per :class:`~docpipe.models.embedding.EmbeddingModel`
member; :class:`~docpipe.services.ingestion.embedding_service.EmbeddingService`
selects between them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations (docpipe/providers/embedding/):
#   OpenAIEmbeddingProvider       text-embedding-3-small, requires API key
#   HuggingFaceEmbeddingProvider  reserved, raises ProviderNotImplementedError
class IEmbeddingProvider(ABC):
    """Contract for embedding services used by the process step."""

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate one embedding vector per text, in input order.

        Implementations are all-or-nothing: on the first failing text they
        raise and return nothing, so callers never see a partial list.

        Raises
        ------
        docpipe.utils.errors.MissingCredentialsError
            If the provider needs an API key and none is configured.
        docpipe.utils.errors.ProviderError
            If the provider call fails; ``chunk_index`` names the failing text.
        """

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the dimensionality of the produced vectors."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"openai_embedding"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured (credentials present)."""
