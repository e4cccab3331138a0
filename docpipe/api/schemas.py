"""Pydantic request/response schemas for the docpipe API.

Defines the public contract for the REST endpoints: upload, process, document
lookup, similarity query and health.  Field names are snake_case in Python
and camelCase on the wire (``documentId``, ``embeddingConfig``, ``topK``).

Upload and process responses reuse :class:`~docpipe.models.document.UploadResult`
and :class:`~docpipe.models.document.ProcessResult` directly.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from docpipe.models.vector import QueryMatch


class ProcessDocumentRequest(BaseModel):
    """Body of ``POST /documents/process``.

    ``embedding_config`` stays a raw dict here; it is validated against the
    configured defaults by :meth:`EmbeddingConfig.from_payload` so bound
    violations surface as ``INVALID_CONFIG`` rather than a generic 422.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    document_id: str = Field(..., min_length=1)
    embedding_config: dict[str, Any] | None = None


class QueryRequest(BaseModel):
    """Body of ``POST /documents/{id}/query``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    vector: list[float] = Field(default_factory=list)
    top_k: int = Field(default=10, ge=1, le=10_000)
    filter: dict[str, Any] | None = None


class QueryResponse(BaseModel):
    """Ranked matches from the document's namespace."""

    matches: list[QueryMatch] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Standard error response body."""

    code: str
    message: str


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]
