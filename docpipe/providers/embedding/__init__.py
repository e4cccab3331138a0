"""Embedding provider implementations.

    OpenAIEmbeddingProvider       text-embedding-3-small (1536 dims), primary.
    HuggingFaceEmbeddingProvider  reserved name, not implemented.
"""

from docpipe.providers.embedding.huggingface_embedding_provider import HuggingFaceEmbeddingProvider
from docpipe.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["HuggingFaceEmbeddingProvider", "OpenAIEmbeddingProvider"]
