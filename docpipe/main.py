"""docpipe FastAPI application entry point.

Wires together all providers and services via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml``, configures
structured logging, and exposes the ingestion routes.

Also provides :func:`build_ingestion_service` for CLI or scripting usage
outside the web server.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from docpipe import __version__
from docpipe.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    register_exception_handlers,
)
from docpipe.api.routes import router as api_router
from docpipe.config.loader import load_config
from docpipe.config.settings import Settings
from docpipe.providers.document_store.sqlite_document_store import SQLiteDocumentStore
from docpipe.providers.vector_store.pinecone_provider import PineconeVectorStore
from docpipe.services.ingestion.chunker import TextChunker
from docpipe.services.ingestion.embedding_service import EmbeddingService
from docpipe.services.ingestion.ingestion_service import IngestionService
from docpipe.services.ingestion.text_extractor import TextExtractor
from docpipe.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# DI assembly
# ---------------------------------------------------------------------------


def build_ingestion_service(
    app_settings: Settings,
    http_client: httpx.AsyncClient | None = None,
) -> tuple[IngestionService, SQLiteDocumentStore, PineconeVectorStore]:
    """Construct the ingestion service and the stores it depends on.

    Returns the service together with its document store (which must be
    initialized before use) and vector store (for availability checks).
    """
    document_store = SQLiteDocumentStore(db_path=app_settings.document_db_path)
    vector_store = PineconeVectorStore(
        api_key=app_settings.pinecone_api_key,
        index_host=app_settings.pinecone_index_host,
        http_client=http_client,
        timeout=app_settings.pinecone_timeout_seconds,
    )
    ingestion_service = IngestionService(
        document_store=document_store,
        text_extractor=TextExtractor(),
        chunker=TextChunker(),
        embedding_service=EmbeddingService(settings=app_settings),
        vector_store=vector_store,
        process_timeout=app_settings.process_timeout_seconds or None,
    )
    return ingestion_service, document_store, vector_store


def _build_all(app_settings: Settings, app_config: dict[str, Any]) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    http_client = httpx.AsyncClient(timeout=app_settings.pinecone_timeout_seconds)
    ingestion_service, document_store, vector_store = build_ingestion_service(
        app_settings, http_client=http_client
    )

    # -- Provider registry for /health --
    provider_registry: dict[str, bool] = {
        "document_store": True,
        "vector_store": vector_store.is_available(),
        "embedding": bool(app_settings.get_available_embedding_providers()),
    }

    if not vector_store.is_available():
        _logger.warning(
            "vector_store_not_configured",
            msg="PINECONE_API_KEY / PINECONE_INDEX_HOST missing; process calls will fail.",
        )

    return {
        "settings": app_settings,
        "config": app_config,
        "version": app_config.get("app", {}).get("version", __version__),
        "http_client": http_client,
        "document_store": document_store,
        "vector_store": vector_store,
        "ingestion_service": ingestion_service,
        "provider_registry": provider_registry,
    }


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(
    app_settings: Settings | None = None,
    app_config: dict[str, Any] | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application."""
    app_settings = app_settings or settings
    app_config = app_config if app_config is not None else config

    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        """Initialise all providers and services on startup, clean up on shutdown."""
        components = _build_all(app_settings, app_config)
        for key, value in components.items():
            setattr(application.state, key, value)

        await components["document_store"].initialize()

        _logger.info(
            "app_startup",
            version=components["version"],
            environment=app_settings.app_env,
            vector_store=components["provider_registry"]["vector_store"],
        )

        yield

        # -- Shutdown: close shared httpx client --
        http_client: httpx.AsyncClient = components["http_client"]
        await http_client.aclose()
        _logger.info("app_shutdown", message="HTTP client closed")

    application = FastAPI(
        title="docpipe API",
        version=__version__,
        description=(
            "Upload PDF, Word or text documents, extract their text, then chunk, "
            "embed and store them in a vector index for semantic retrieval."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=app_settings.get_cors_origins())
    register_exception_handlers(application)

    application.include_router(api_router)
    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "docpipe.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
