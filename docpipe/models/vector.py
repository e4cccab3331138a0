"""Transient pipeline models: chunks, vectors and query matches.

None of these are persisted locally.  :class:`TextChunk` lives only inside a
process call; :class:`Vector` is what gets sent to the vector store;
:class:`QueryMatch` is what comes back from a similarity query.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Metadata keys written by the pipeline.  Caller-supplied metadata cannot
# override these.
RESERVED_METADATA_KEYS = frozenset({"documentId", "fileName", "chunkIndex", "text", "createdAt"})


def vector_id_for(document_id: str, chunk_index: int) -> str:
    """Deterministic vector id: ``<documentId>-chunk-<index>``."""
    return f"{document_id}-chunk-{chunk_index}"


def namespace_for(document_id: str) -> str:
    """Vector-store namespace holding one document's vectors."""
    return f"document-{document_id}"


class TextChunk(BaseModel):
    """An ordered slice of a document's text; the unit of embedding."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0, description="0-based position within the document.")
    text: str


class Vector(BaseModel):
    """An embedding plus its metadata, keyed by a deterministic id."""

    model_config = ConfigDict(frozen=True)

    id: str
    values: list[float]
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_chunk(
        cls,
        *,
        document_id: str,
        file_name: str,
        chunk: TextChunk,
        values: list[float],
        created_at: str,
        extra_metadata: dict[str, Any] | None = None,
    ) -> Vector:
        metadata: dict[str, Any] = {
            k: v for k, v in (extra_metadata or {}).items() if k not in RESERVED_METADATA_KEYS
        }
        metadata.update(
            {
                "documentId": document_id,
                "fileName": file_name,
                "chunkIndex": chunk.index,
                "text": chunk.text,
                "createdAt": created_at,
            }
        )
        return cls(id=vector_id_for(document_id, chunk.index), values=values, metadata=metadata)

    def to_wire(self) -> dict[str, Any]:
        return {"id": self.id, "values": self.values, "metadata": self.metadata}


class QueryMatch(BaseModel):
    """One ranked result of a similarity query."""

    model_config = ConfigDict(frozen=True)

    id: str
    score: float = 0.0
    values: list[float] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
