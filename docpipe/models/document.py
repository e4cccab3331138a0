"""Document lifecycle models.

A :class:`Document` is the persisted record of one upload.  It is created by
the upload step with status ``uploaded`` and mutated only by the process step,
which moves it to ``processed`` or ``error``.  Models are frozen; status
changes go through :meth:`Document.with_status`, which returns a copy.

Wire format is camelCase (``fileName``, ``createdAt``) to match the HTTP
contract; Python code uses the snake_case attribute names.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentStatus(str, Enum):  # noqa: UP042
    """Lifecycle states for an uploaded document."""

    UPLOADED = "uploaded"
    PROCESSED = "processed"
    ERROR = "error"

    def can_transition_to(self, target: DocumentStatus) -> bool:
        """Return ``True`` if a process step may move a document from this state to *target*.

        ``uploaded`` is initial only; nothing transitions back into it.
        ``processed`` and ``error`` can be re-targeted by a new process call.
        """
        return target in (DocumentStatus.PROCESSED, DocumentStatus.ERROR)


class Document(BaseModel):
    """A single ingested file and its extracted plain text."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(description="Opaque unique identifier generated at upload.")
    file_name: str = Field(description="Original file name as uploaded.")
    file_type: str = Field(description="Canonical MIME type resolved from the extension.")
    text: str = Field(default="", description="Extracted, whitespace-trimmed plain text.")
    status: DocumentStatus = DocumentStatus.UPLOADED
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def with_status(self, status: DocumentStatus) -> Document:
        """Return a copy with *status* applied and ``updated_at`` refreshed."""
        return self.model_copy(update={"status": status, "updated_at": utc_now()})


class UploadResult(BaseModel):
    """Response of the upload step."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    document_id: str
    file_name: str
    file_type: str
    text: str
    status: DocumentStatus

    @classmethod
    def from_document(cls, document: Document) -> UploadResult:
        return cls(
            document_id=document.id,
            file_name=document.file_name,
            file_type=document.file_type,
            text=document.text,
            status=document.status,
        )


class ProcessResult(BaseModel):
    """Response of the process step."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    vector_id: str
    status: DocumentStatus
    chunks_count: int = Field(ge=0)
