"""Orchestrator for the document ingestion pipeline.

Two entry points, matching the two halves of a document's life:

    upload   validate -> extract -> persist (status ``uploaded``)
    process  load -> chunk -> embed -> build vectors -> upsert -> mark ``processed``

The :class:`IngestionService` coordinates its collaborators (document
store, text extractor, chunker, embedding service, vector store) without any
of them knowing about each other.  All dependencies are injected via the
constructor, so the vector store or embedding providers can be swapped in
tests without touching this class.

Status policy for failed process calls: errors raised before any external
call (bad config, missing credentials, blank text, unconfigured store) leave
the document untouched.  Errors from the embedding provider or the vector
store, and deadline expiry, mark the document ``error``.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog

from docpipe.models.document import Document, DocumentStatus, ProcessResult, UploadResult, utc_now
from docpipe.models.embedding import EmbeddingConfig
from docpipe.models.vector import QueryMatch, Vector, namespace_for
from docpipe.services.ingestion.chunker import TextChunker
from docpipe.services.ingestion.embedding_service import EmbeddingService
from docpipe.services.ingestion.format_detector import validate_file_type
from docpipe.services.ingestion.text_extractor import TextExtractor
from docpipe.utils.errors import (
    ConfigurationError,
    DeadlineExceededError,
    DocumentNotFoundError,
    ProviderError,
    StatusConflictError,
    StoreError,
)

if TYPE_CHECKING:
    from docpipe.interfaces.document_store import IDocumentStore
    from docpipe.interfaces.vector_store_provider import IVectorStoreProvider

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Uploads documents and turns them into stored vectors.

    Parameters
    ----------
    document_store:
        Persists :class:`Document` records and their status.
    text_extractor:
        Converts uploaded files into plain text.
    chunker:
        Splits document text into chunks.
    embedding_service:
        Selects an embedding provider per request and embeds chunks.
    vector_store:
        Receives the vectors of processed documents.
    process_timeout:
        Default deadline in seconds for :meth:`process`; ``None`` disables it.
    """

    def __init__(
        self,
        document_store: IDocumentStore,
        text_extractor: TextExtractor,
        chunker: TextChunker,
        embedding_service: EmbeddingService,
        vector_store: IVectorStoreProvider,
        process_timeout: float | None = None,
    ) -> None:
        self._document_store = document_store
        self._text_extractor = text_extractor
        self._chunker = chunker
        self._embedding_service = embedding_service
        self._vector_store = vector_store
        self._process_timeout = process_timeout
        # Serializes process calls per document id within this service.  An
        # entry lives only while some call holds or waits on it.
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: Counter[str] = Counter()

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    async def upload(
        self,
        file_path: str | Path,
        file_name: str,
        content_type: str | None = None,
    ) -> UploadResult:
        """Validate, extract and persist one uploaded file.

        Parameters
        ----------
        file_path:
            Where the uploaded bytes are stored on disk.
        file_name:
            The client's file name; its extension selects the format.
        content_type:
            Optional declared MIME type, checked against the allowed set.

        Raises
        ------
        UnsupportedFormatError
            Before extraction, if the extension or content type is rejected.
        ExtractionFailedError, FileTooLargeError
            If the file cannot be converted to text.
        """
        file_type = validate_file_type(file_name, content_type)
        text = await asyncio.to_thread(self._text_extractor.extract, file_path, file_type)

        now = utc_now()
        document = Document(
            id=str(uuid4()),
            file_name=file_name,
            file_type=file_type,
            text=text,
            status=DocumentStatus.UPLOADED,
            created_at=now,
            updated_at=now,
        )
        await self._document_store.insert(document)

        logger.info(
            "document_uploaded",
            document_id=document.id,
            file_name=file_name,
            file_type=file_type,
            chars=len(text),
        )
        return UploadResult.from_document(document)

    async def get_document(self, document_id: str) -> Document:
        """Return the stored document or raise :class:`DocumentNotFoundError`."""
        document = await self._document_store.get(document_id)
        if document is None:
            raise DocumentNotFoundError(message=f"Document not found: {document_id}")
        return document

    # ------------------------------------------------------------------
    # Process
    # ------------------------------------------------------------------

    async def process(
        self,
        document_id: str,
        config: EmbeddingConfig,
        deadline: float | None = None,
    ) -> ProcessResult:
        """Chunk, embed and store a previously uploaded document.

        Parameters
        ----------
        document_id:
            Id returned by :meth:`upload`.
        config:
            Chunking and embedding parameters for this call.
        deadline:
            Seconds allowed for chunk + embed + upsert.  Falls back to the
            service default.

        Returns
        -------
        ProcessResult
            ``vector-<documentId>``, the new status and the chunk count.

        Raises
        ------
        DocumentNotFoundError
            If *document_id* is unknown.
        ConfigurationError
            If the vector store is not configured; nothing is embedded.
        DeadlineExceededError
            If the deadline fires; the upsert is never issued.
        """
        timeout = deadline if deadline is not None else self._process_timeout

        async with self._document_lock(document_id):
            document = await self.get_document(document_id)

            if not self._vector_store.is_available():
                raise ConfigurationError(
                    message="Vector store is not configured",
                    provider_name=self._vector_store.get_provider_name(),
                )

            logger.info(
                "document_processing_started",
                document_id=document_id,
                strategy=config.chunking_strategy.value,
                chunk_size=config.chunk_size,
                overlap=config.overlap,
                embedding_model=config.embedding_model.value,
            )

            try:
                chunks_count = await asyncio.wait_for(
                    self._run_pipeline(document, config), timeout=timeout
                )
            except asyncio.TimeoutError as exc:
                logger.warning("document_processing_timeout", document_id=document_id, timeout=timeout)
                await self._mark_error(document)
                raise DeadlineExceededError(
                    message=f"Processing document {document_id} exceeded {timeout}s"
                ) from exc
            except (ProviderError, StoreError) as exc:
                logger.error(
                    "document_processing_failed",
                    document_id=document_id,
                    error_code=exc.code,
                    error=str(exc),
                )
                await self._mark_error(document)
                raise

            updated = await self._document_store.update_status(
                document_id, DocumentStatus.PROCESSED, expected_status=document.status
            )

        logger.info("document_processed", document_id=document_id, chunks=chunks_count)
        return ProcessResult(
            vector_id=f"vector-{document_id}",
            status=updated.status,
            chunks_count=chunks_count,
        )

    @asynccontextmanager
    async def _document_lock(self, document_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(document_id, asyncio.Lock())
        self._lock_users[document_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[document_id] -= 1
            if not self._lock_users[document_id]:
                del self._lock_users[document_id]
                del self._locks[document_id]

    async def _run_pipeline(self, document: Document, config: EmbeddingConfig) -> int:
        chunks = self._chunker.chunk(
            document.text,
            config.chunk_size,
            config.overlap,
            config.chunking_strategy,
        )
        embeddings = await self._embedding_service.embed(
            chunks, config.embedding_model, config.provider_api_key
        )

        created_at = utc_now().isoformat()
        vectors = [
            Vector.from_chunk(
                document_id=document.id,
                file_name=document.file_name,
                chunk=chunk,
                values=values,
                created_at=created_at,
                extra_metadata=config.metadata,
            )
            for chunk, values in zip(chunks, embeddings)
        ]

        await self._vector_store.upsert(vectors, namespace_for(document.id))
        return len(chunks)

    async def _mark_error(self, document: Document) -> None:
        try:
            await self._document_store.update_status(
                document.id, DocumentStatus.ERROR, expected_status=document.status
            )
        except StatusConflictError as exc:
            # The original failure is what the caller needs to see.
            logger.warning("document_error_status_conflict", document_id=document.id, error=str(exc))

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    async def query(
        self,
        document_id: str,
        vector: list[float],
        top_k: int = 10,
        filter: dict[str, Any] | None = None,
    ) -> list[QueryMatch]:
        """Similarity search within one document's namespace."""
        await self.get_document(document_id)
        if not self._vector_store.is_available():
            raise ConfigurationError(
                message="Vector store is not configured",
                provider_name=self._vector_store.get_provider_name(),
            )
        return await self._vector_store.query(
            vector, top_k=top_k, namespace=namespace_for(document_id), filter=filter
        )
