"""FastAPI API routes for the docpipe pipeline.

Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern.

    Endpoint                            Method  Description
    /api/v1/documents/upload            POST    Upload file -> extracted text
    /api/v1/documents/process           POST    Chunk, embed and store a document
    /api/v1/documents/{id}              GET     Stored document record
    /api/v1/documents/{id}/query        POST    Similarity search in the document's namespace
    /api/v1/health                      GET     Health check + provider status

Errors are raised as ``DocPipeError`` subclasses and turned into
``{code, message}`` bodies by :class:`~docpipe.api.middleware.ErrorHandlingMiddleware`.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Request, UploadFile

from docpipe.api.schemas import (
    ErrorResponse,
    HealthResponse,
    ProcessDocumentRequest,
    QueryRequest,
    QueryResponse,
)
from docpipe.config.settings import Settings
from docpipe.models.document import Document, ProcessResult, UploadResult
from docpipe.models.embedding import EmbeddingConfig
from docpipe.services.ingestion.format_detector import file_extension, validate_file_type
from docpipe.services.ingestion.ingestion_service import IngestionService
from docpipe.utils.errors import FileTooLargeError
from docpipe.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

# Uploads are streamed to disk in 64 KB reads so oversized files are
# rejected without being buffered in memory.
_UPLOAD_CHUNK_SIZE = 64 * 1024


# ---------------------------------------------------------------------------
# Dependency injection helpers: resolve singletons from app.state
# ---------------------------------------------------------------------------


def _get_ingestion_service(request: Request) -> IngestionService:
    """Return the ingestion service from application state."""
    return request.app.state.ingestion_service


def _get_settings(request: Request) -> Settings:
    """Return application settings from application state."""
    return request.app.state.settings


def _get_config(request: Request) -> dict[str, Any]:
    """Return the merged YAML + env configuration from application state."""
    return request.app.state.config


IngestionDep = Annotated[IngestionService, Depends(_get_ingestion_service)]
SettingsDep = Annotated[Settings, Depends(_get_settings)]
ConfigDep = Annotated[dict[str, Any], Depends(_get_config)]


# ---------------------------------------------------------------------------
# Document endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/documents/upload",
    response_model=UploadResult,
    responses={
        413: {"model": ErrorResponse},
        415: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Upload a PDF, Word or text file and extract its text",
)
async def upload_document(
    file: UploadFile,
    ingestion: IngestionDep,
    settings: SettingsDep,
) -> UploadResult:
    """Accept a document upload, extract its plain text and persist it."""
    file_name = file.filename or ""
    # Reject bad formats before reading the body.
    validate_file_type(file_name, file.content_type)

    temp_dir = Path(settings.upload_temp_dir)
    temp_dir.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        dir=temp_dir, suffix=file_extension(file_name), delete=False
    ) as handle:
        temp_path = Path(handle.name)

    try:
        total_size = 0
        with open(temp_path, "wb") as out:
            while True:
                chunk = await file.read(_UPLOAD_CHUNK_SIZE)
                if not chunk:
                    break
                total_size += len(chunk)
                if total_size > settings.max_upload_bytes:
                    raise FileTooLargeError(
                        message=(
                            f"File too large: >{settings.max_upload_bytes // (1024 * 1024)} MB. "
                            f"Maximum: {settings.max_upload_bytes} bytes."
                        )
                    )
                out.write(chunk)

        _logger.debug("upload_received", file_name=file_name, bytes=total_size)
        return await ingestion.upload(temp_path, file_name, file.content_type)
    finally:
        temp_path.unlink(missing_ok=True)


@router.post(
    "/documents/process",
    response_model=ProcessResult,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
    summary="Chunk, embed and store an uploaded document",
)
async def process_document(
    body: ProcessDocumentRequest,
    ingestion: IngestionDep,
    config: ConfigDep,
) -> ProcessResult:
    """Run the process pipeline for one document with the request's embedding config."""
    embedding_config = EmbeddingConfig.from_payload(
        body.embedding_config, defaults=config.get("chunking")
    )
    return await ingestion.process(body.document_id, embedding_config)


@router.get(
    "/documents/{document_id}",
    response_model=Document,
    responses={404: {"model": ErrorResponse}},
    summary="Fetch a stored document record",
)
async def get_document(document_id: str, ingestion: IngestionDep) -> Document:
    """Return the persisted document, including its extracted text and status."""
    return await ingestion.get_document(document_id)


@router.post(
    "/documents/{document_id}/query",
    response_model=QueryResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Similarity search within a processed document",
)
async def query_document(
    document_id: str,
    body: QueryRequest,
    ingestion: IngestionDep,
) -> QueryResponse:
    """Query the document's namespace with a caller-supplied embedding."""
    matches = await ingestion.query(
        document_id, body.vector, top_k=body.top_k, filter=body.filter
    )
    return QueryResponse(matches=matches)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider availability."""
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)

    all_ok = all(bool(v) for v in providers.values()) if providers else False
    status = "healthy" if all_ok else "degraded"

    return HealthResponse(
        status=status,
        version=getattr(request.app.state, "version", "0.1.0"),
        providers=providers,
    )
