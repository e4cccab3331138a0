"""Pydantic v2 data models for documents, embedding configuration and vectors.

Re-exports
----------
Document, DocumentStatus, UploadResult, ProcessResult
    Persisted document record, its lifecycle states, and step results.
EmbeddingConfig, ChunkingStrategy, EmbeddingModel
    Per-request chunking / embedding configuration.
TextChunk, Vector, QueryMatch
    Transient pipeline values.
"""

from docpipe.models.document import Document, DocumentStatus, ProcessResult, UploadResult
from docpipe.models.embedding import ChunkingStrategy, EmbeddingConfig, EmbeddingModel
from docpipe.models.vector import QueryMatch, TextChunk, Vector, namespace_for, vector_id_for

__all__ = [
    "ChunkingStrategy",
    "Document",
    "DocumentStatus",
    "EmbeddingConfig",
    "EmbeddingModel",
    "ProcessResult",
    "QueryMatch",
    "TextChunk",
    "UploadResult",
    "Vector",
    "namespace_for",
    "vector_id_for",
]
