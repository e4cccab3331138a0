"""OpenAI-compatible embedding provider adapter.

Wraps the ``openai`` async client to implement :class:`IEmbeddingProvider`.
Supports both real OpenAI and OpenAI-compatible providers via a custom
``base_url`` and model name.  The API key may come from the process request
itself or, when absent, from ``OPENAI_API_KEY``.
"""

from __future__ import annotations

import openai
import structlog

from docpipe.config.settings import Settings
from docpipe.interfaces.embedding_provider import IEmbeddingProvider
from docpipe.utils.errors import MissingCredentialsError, ProviderError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "text-embedding-3-small"

# Known embedding model dimensions.
_MODEL_DIMENSIONS: dict[str, int] = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class OpenAIEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by an OpenAI-compatible embeddings API.

    Chunks are embedded one request at a time, in order.  The first failure
    aborts the whole call with :class:`ProviderError` naming the failing
    chunk; embeddings produced before it are dropped.  The client lives for
    a single :meth:`embed` call and is closed when it returns or raises.
    """

    def __init__(self, settings: Settings, api_key: str | None = None) -> None:
        self._settings = settings
        self._api_key = api_key or settings.openai_api_key
        self._base_url = settings.openai_base_url
        self._model = settings.openai_embedding_model or _DEFAULT_MODEL
        self._dimension = _MODEL_DIMENSIONS.get(self._model, 1536)
        self._provider_label = (
            "openai-compatible_embedding" if settings.openai_base_url else "openai_embedding"
        )
        self._client: openai.AsyncOpenAI | None = None

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed each text with its own request, preserving order."""
        if not self._api_key:
            raise MissingCredentialsError(
                message="OpenAI API key is not configured",
                provider_name=self.get_provider_name(),
            )
        if not texts:
            return []

        client = self._get_client()
        embeddings: list[list[float]] = []
        try:
            for index, text in enumerate(texts):
                try:
                    response = await client.embeddings.create(input=[text], model=self._model)
                except openai.OpenAIError as exc:
                    logger.warning(
                        "openai_embedding_failed",
                        provider=self._provider_label,
                        chunk_index=index,
                        error=str(exc),
                    )
                    raise ProviderError(
                        message=f"Embedding failed for chunk {index}: {exc}",
                        provider_name=self.get_provider_name(),
                        chunk_index=index,
                    ) from exc

                if not response.data:
                    raise ProviderError(
                        message=f"No embedding returned for chunk {index}",
                        provider_name=self.get_provider_name(),
                        chunk_index=index,
                    )
                embeddings.append(list(response.data[0].embedding))
        finally:
            await self.close()

        logger.info(
            "openai_embedding_complete",
            model=self._model,
            provider=self._provider_label,
            chunks=len(embeddings),
        )
        return embeddings

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return self._provider_label

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""
        return bool(self._api_key)

    async def close(self) -> None:
        """Release the HTTP client; the next :meth:`embed` builds a fresh one."""
        if self._client is not None:
            client, self._client = self._client, None
            await client.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_client(self) -> openai.AsyncOpenAI:
        # Built lazily: AsyncOpenAI refuses to construct without a key.
        if self._client is None:
            client_kwargs: dict = {"api_key": self._api_key}
            if self._base_url:
                client_kwargs["base_url"] = self._base_url
            self._client = openai.AsyncOpenAI(**client_kwargs)
        return self._client
