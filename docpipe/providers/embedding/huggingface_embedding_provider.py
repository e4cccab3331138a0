"""Placeholder for a Hugging Face Inference API embedding provider.

The ``huggingface`` provider name is accepted by :class:`EmbeddingConfig` so
that clients can already send it, but no backend is wired up yet.  Every
call fails with :class:`ProviderNotImplementedError`.
"""

from __future__ import annotations

from docpipe.config.settings import Settings
from docpipe.interfaces.embedding_provider import IEmbeddingProvider
from docpipe.utils.errors import ProviderNotImplementedError


class HuggingFaceEmbeddingProvider(IEmbeddingProvider):
    """Reserved provider slot; always raises on :meth:`embed`."""

    def __init__(self, settings: Settings, api_key: str | None = None) -> None:
        self._api_key = api_key or settings.huggingface_api_key

    async def embed(self, texts: list[str]) -> list[list[float]]:
        raise ProviderNotImplementedError(
            message="Hugging Face embeddings are not implemented yet",
            provider_name=self.get_provider_name(),
        )

    def get_dimension(self) -> int:
        return 0

    def get_provider_name(self) -> str:
        return "huggingface_embedding"

    def is_available(self) -> bool:
        return False
