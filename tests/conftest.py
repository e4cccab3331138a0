"""Shared pytest fixtures for the docpipe test suite."""

from __future__ import annotations

import hashlib
import struct
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio

from docpipe.config.settings import Settings
from docpipe.interfaces.embedding_provider import IEmbeddingProvider
from docpipe.interfaces.vector_store_provider import IVectorStoreProvider
from docpipe.models.embedding import EmbeddingModel
from docpipe.models.vector import QueryMatch, Vector
from docpipe.providers.document_store.sqlite_document_store import SQLiteDocumentStore
from docpipe.services.ingestion.chunker import TextChunker
from docpipe.services.ingestion.embedding_service import EmbeddingService
from docpipe.services.ingestion.ingestion_service import IngestionService
from docpipe.services.ingestion.text_extractor import TextExtractor

# ---------------------------------------------------------------------------
# Deterministic in-memory providers
# ---------------------------------------------------------------------------

_EMBEDDING_DIM = 8


def _hash_to_vector(text: str) -> list[float]:
    """Derive a stable pseudo-embedding from the SHA-256 of *text*."""
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    raw = struct.unpack(f"{_EMBEDDING_DIM}i", digest[: _EMBEDDING_DIM * 4])
    return [v / 2**31 for v in raw]


class MockEmbeddingProvider(IEmbeddingProvider):
    """In-memory deterministic embedding provider for tests.

    ``fail_with`` makes :meth:`embed` raise the given exception instead of
    returning, to exercise error paths.
    """

    def __init__(self, fail_with: Exception | None = None) -> None:
        self.fail_with = fail_with
        self.calls: list[list[str]] = []

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        if self.fail_with is not None:
            raise self.fail_with
        return [_hash_to_vector(t) for t in texts]

    def get_dimension(self) -> int:
        return _EMBEDDING_DIM

    def get_provider_name(self) -> str:
        return "mock-embedding"

    def is_available(self) -> bool:
        return True


class MockVectorStore(IVectorStoreProvider):
    """In-memory vector store keyed by namespace.

    Queries return every vector in the namespace ranked by dot product.
    """

    def __init__(self, available: bool = True) -> None:
        self.available = available
        self.namespaces: dict[str, dict[str, Vector]] = {}
        self.upsert_calls: list[tuple[list[Vector], str]] = []
        self.fail_with: Exception | None = None
        self.closed = False

    async def upsert(self, vectors: list[Vector], namespace: str) -> int:
        self.upsert_calls.append((list(vectors), namespace))
        if self.fail_with is not None:
            raise self.fail_with
        bucket = self.namespaces.setdefault(namespace, {})
        for vector in vectors:
            bucket[vector.id] = vector
        return len(vectors)

    async def query(
        self,
        vector: list[float],
        top_k: int = 10,
        namespace: str = "",
        filter: dict[str, Any] | None = None,
    ) -> list[QueryMatch]:
        scored = [
            QueryMatch(
                id=v.id,
                score=sum(a * b for a, b in zip(vector, v.values)),
                values=v.values,
                metadata=v.metadata,
            )
            for v in self.namespaces.get(namespace, {}).values()
        ]
        scored.sort(key=lambda m: m.score, reverse=True)
        return scored[:top_k]

    def get_provider_name(self) -> str:
        return "mock-vector-store"

    def is_available(self) -> bool:
        return self.available

    async def close(self) -> None:
        self.closed = True


# ---------------------------------------------------------------------------
# Settings & service fixtures
# ---------------------------------------------------------------------------


def make_settings(**overrides: Any) -> Settings:
    """Build a Settings instance with test defaults, ignoring any local ``.env``."""
    defaults: dict[str, Any] = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "openai_embedding_model": "text-embedding-3-small",
        "pinecone_api_key": "pc-test",
        "pinecone_index_host": "https://docs-test.svc.pinecone.io",
        "document_db_path": "data/test-documents.db",
        "process_timeout_seconds": 30.0,
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(
        document_db_path=str(tmp_path / "documents.db"),
        upload_temp_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def mock_embedding_provider() -> MockEmbeddingProvider:
    return MockEmbeddingProvider()


@pytest.fixture
def mock_vector_store() -> MockVectorStore:
    return MockVectorStore()


@pytest.fixture
def embedding_service(
    settings: Settings, mock_embedding_provider: MockEmbeddingProvider
) -> EmbeddingService:
    """EmbeddingService whose ``openai`` slot returns the mock provider."""
    return EmbeddingService(
        settings,
        factories={EmbeddingModel.OPENAI: lambda _settings, _key: mock_embedding_provider},
    )


@pytest_asyncio.fixture
async def document_store(tmp_path: Path) -> SQLiteDocumentStore:
    store = SQLiteDocumentStore(db_path=tmp_path / "documents.db")
    await store.initialize()
    return store


@pytest.fixture
def ingestion_service(
    document_store: SQLiteDocumentStore,
    embedding_service: EmbeddingService,
    mock_vector_store: MockVectorStore,
) -> IngestionService:
    return IngestionService(
        document_store=document_store,
        text_extractor=TextExtractor(),
        chunker=TextChunker(),
        embedding_service=embedding_service,
        vector_store=mock_vector_store,
        process_timeout=10.0,
    )


# ---------------------------------------------------------------------------
# Sample content
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_paragraph_text() -> str:
    """Multi-paragraph text about document handling for chunker tests."""
    return (
        "Records retention policies decide how long each class of document is "
        "kept before it is archived or destroyed. Contracts, invoices and "
        "personnel files usually carry different retention periods.\n\n"
        "Before a document enters the archive it is classified by owner, "
        "sensitivity and retention class. Classification drives both access "
        "control and the eventual disposal date.\n\n"
        "Scanned paper records are converted to searchable text so that the "
        "same search tools work across digital and digitised material. Optical "
        "character recognition quality is reviewed on a sample basis.\n\n"
        "Legal holds suspend disposal for any document connected to ongoing "
        "litigation. A hold overrides the retention schedule until counsel "
        "releases it in writing.\n\n"
        "Audit logs record every access to restricted documents, including "
        "reads, exports and deletions, and are themselves retained for seven "
        "years."
    )


@pytest.fixture
def sample_section_text() -> str:
    """Text with upper-case and colon-terminated headings."""
    return (
        "INTRODUCTION\n"
        "This handbook explains how the team stores and retrieves documents.\n"
        "It applies to every department.\n"
        "\n"
        "Scope:\n"
        "Contracts, invoices and personnel records are in scope.\n"
        "Marketing drafts are not.\n"
        "\n"
        "RETENTION\n"
        "Contracts are kept for ten years after expiry.\n"
        "Invoices are kept for seven years.\n"
    )


@pytest.fixture
def text_file(tmp_path: Path, sample_paragraph_text: str) -> Path:
    path = tmp_path / "policy.txt"
    path.write_text(sample_paragraph_text, encoding="utf-8")
    return path
