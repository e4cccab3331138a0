"""Embedding provider selection and dispatch.

:class:`EmbeddingService` turns an :class:`~docpipe.models.embedding.EmbeddingModel`
name plus an optional per-request API key into a concrete
:class:`~docpipe.interfaces.embedding_provider.IEmbeddingProvider` and runs
the chunk texts through it.
"""

from __future__ import annotations

from typing import Callable

import structlog

from docpipe.config.settings import Settings
from docpipe.interfaces.embedding_provider import IEmbeddingProvider
from docpipe.models.embedding import EmbeddingModel
from docpipe.models.vector import TextChunk
from docpipe.providers.embedding import HuggingFaceEmbeddingProvider, OpenAIEmbeddingProvider
from docpipe.utils.errors import NoInputError, ProviderError

logger = structlog.get_logger(logger_name=__name__)

ProviderFactory = Callable[[Settings, str | None], IEmbeddingProvider]

_DEFAULT_FACTORIES: dict[EmbeddingModel, ProviderFactory] = {
    EmbeddingModel.OPENAI: lambda settings, api_key: OpenAIEmbeddingProvider(settings, api_key=api_key),
    EmbeddingModel.HUGGINGFACE: lambda settings, api_key: HuggingFaceEmbeddingProvider(
        settings, api_key=api_key
    ),
}


class EmbeddingService:
    """Embeds chunks with the provider named in the request.

    Parameters
    ----------
    settings:
        Application settings; supplies fallback API keys and model names.
    factories:
        Optional override of the provider factory table, keyed by
        :class:`EmbeddingModel`.
    """

    def __init__(
        self,
        settings: Settings,
        factories: dict[EmbeddingModel, ProviderFactory] | None = None,
    ) -> None:
        self._settings = settings
        self._factories = dict(factories or _DEFAULT_FACTORIES)

    def get_provider(
        self,
        provider_name: EmbeddingModel | str = EmbeddingModel.OPENAI,
        api_key: str | None = None,
    ) -> IEmbeddingProvider:
        """Build the provider for *provider_name*; unknown names mean ``openai``."""
        model = EmbeddingModel(provider_name)
        return self._factories[model](self._settings, api_key)

    async def embed(
        self,
        chunks: list[TextChunk] | list[str],
        provider_name: EmbeddingModel | str = EmbeddingModel.OPENAI,
        api_key: str | None = None,
    ) -> list[list[float]]:
        """Return one embedding per chunk, in chunk order.

        Raises
        ------
        NoInputError
            If *chunks* is empty.
        MissingCredentialsError, ProviderError, ProviderNotImplementedError
            Propagated from the selected provider.
        """
        if not chunks:
            raise NoInputError()

        texts = [c.text if isinstance(c, TextChunk) else c for c in chunks]
        provider = self.get_provider(provider_name, api_key)
        embeddings = await provider.embed(texts)

        if len(embeddings) != len(texts):
            raise ProviderError(
                message=f"Provider returned {len(embeddings)} embeddings for {len(texts)} chunks",
                provider_name=provider.get_provider_name(),
            )

        logger.info(
            "chunks_embedded",
            provider=provider.get_provider_name(),
            chunks=len(embeddings),
        )
        return embeddings
