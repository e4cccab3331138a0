"""Unit tests for IngestionService: upload, process, query and status policy."""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import patch

import pytest

from docpipe.config.settings import Settings
from docpipe.models.document import DocumentStatus
from docpipe.models.embedding import EmbeddingConfig, EmbeddingModel
from docpipe.providers.document_store.sqlite_document_store import SQLiteDocumentStore
from docpipe.services.ingestion.chunker import TextChunker
from docpipe.services.ingestion.embedding_service import EmbeddingService
from docpipe.services.ingestion.ingestion_service import IngestionService
from docpipe.services.ingestion.text_extractor import TextExtractor
from docpipe.utils.errors import (
    ConfigurationError,
    DeadlineExceededError,
    DocumentNotFoundError,
    EmptyInputError,
    MissingCredentialsError,
    ProviderError,
    ProviderNotImplementedError,
    StoreError,
    UnsupportedFormatError,
)
from tests.conftest import MockEmbeddingProvider, MockVectorStore, make_settings


def _config(**overrides) -> EmbeddingConfig:
    fields = {"chunk_size": 200, "overlap": 20}
    fields.update(overrides)
    return EmbeddingConfig(**fields)


def _service(
    document_store: SQLiteDocumentStore,
    vector_store: MockVectorStore,
    embedding_service: EmbeddingService,
    process_timeout: float | None = 10.0,
) -> IngestionService:
    return IngestionService(
        document_store=document_store,
        text_extractor=TextExtractor(),
        chunker=TextChunker(),
        embedding_service=embedding_service,
        vector_store=vector_store,
        process_timeout=process_timeout,
    )


# ======================================================================
# Upload
# ======================================================================


class TestUpload:
    @pytest.mark.asyncio
    async def test_upload_short_text_file(
        self, ingestion_service: IngestionService, tmp_path: Path
    ) -> None:
        path = tmp_path / "short.txt"
        text = "Fifty characters of plain text for a short upload"
        path.write_text(f"  {text}\n", encoding="utf-8")

        result = await ingestion_service.upload(path, "short.txt")

        assert result.file_name == "short.txt"
        assert result.file_type == "text/plain"
        assert result.text == text
        assert result.status == DocumentStatus.UPLOADED
        assert result.document_id

        chunks = TextChunker().chunk(result.text, 500, 50, "characters")
        assert [c.text for c in chunks] == [text]

    @pytest.mark.asyncio
    async def test_upload_persists_document(
        self,
        ingestion_service: IngestionService,
        document_store: SQLiteDocumentStore,
        text_file: Path,
    ) -> None:
        result = await ingestion_service.upload(text_file, "policy.txt", "text/plain")

        stored = await document_store.get(result.document_id)
        assert stored is not None
        assert stored.text == result.text
        assert stored.status == DocumentStatus.UPLOADED

    @pytest.mark.asyncio
    async def test_unsupported_extension_rejected_before_extraction(
        self, ingestion_service: IngestionService, tmp_path: Path
    ) -> None:
        path = tmp_path / "installer.exe"
        path.write_bytes(b"MZ\x90\x00")

        with patch.object(TextExtractor, "extract") as extract:
            with pytest.raises(UnsupportedFormatError):
                await ingestion_service.upload(path, "installer.exe")

        extract.assert_not_called()

    @pytest.mark.asyncio
    async def test_document_ids_are_unique(
        self, ingestion_service: IngestionService, text_file: Path
    ) -> None:
        first = await ingestion_service.upload(text_file, "policy.txt")
        second = await ingestion_service.upload(text_file, "policy.txt")
        assert first.document_id != second.document_id

    @pytest.mark.asyncio
    async def test_get_document_unknown(self, ingestion_service: IngestionService) -> None:
        with pytest.raises(DocumentNotFoundError):
            await ingestion_service.get_document("nope")


# ======================================================================
# Process
# ======================================================================


class TestProcess:
    @pytest.mark.asyncio
    async def test_process_stores_one_vector_per_chunk(
        self,
        ingestion_service: IngestionService,
        mock_vector_store: MockVectorStore,
        document_store: SQLiteDocumentStore,
        text_file: Path,
    ) -> None:
        uploaded = await ingestion_service.upload(text_file, "policy.txt")
        config = _config(metadata={"team": "legal"})

        result = await ingestion_service.process(uploaded.document_id, config)

        expected_chunks = TextChunker().chunk(uploaded.text, 200, 20, "characters")
        assert result.vector_id == f"vector-{uploaded.document_id}"
        assert result.status == DocumentStatus.PROCESSED
        assert result.chunks_count == len(expected_chunks)

        vectors, namespace = mock_vector_store.upsert_calls[0]
        assert namespace == f"document-{uploaded.document_id}"
        assert [v.id for v in vectors] == [
            f"{uploaded.document_id}-chunk-{i}" for i in range(len(expected_chunks))
        ]
        for vector, chunk in zip(vectors, expected_chunks):
            assert vector.metadata["text"] == chunk.text
            assert vector.metadata["chunkIndex"] == chunk.index
            assert vector.metadata["documentId"] == uploaded.document_id
            assert vector.metadata["fileName"] == "policy.txt"
            assert vector.metadata["team"] == "legal"
            assert vector.metadata["createdAt"]

        stored = await document_store.get(uploaded.document_id)
        assert stored.status == DocumentStatus.PROCESSED

    @pytest.mark.asyncio
    async def test_query_returns_stored_chunks(
        self,
        ingestion_service: IngestionService,
        mock_embedding_provider: MockEmbeddingProvider,
        text_file: Path,
    ) -> None:
        uploaded = await ingestion_service.upload(text_file, "policy.txt")
        await ingestion_service.process(uploaded.document_id, _config())
        query_vector = (await mock_embedding_provider.embed(["retention schedule"]))[0]

        matches = await ingestion_service.query(uploaded.document_id, query_vector, top_k=3)

        assert len(matches) == 3
        assert all(m.id.startswith(f"{uploaded.document_id}-chunk-") for m in matches)
        assert matches[0].score >= matches[1].score >= matches[2].score
        assert all(m.metadata["documentId"] == uploaded.document_id for m in matches)

    @pytest.mark.asyncio
    async def test_unknown_document(self, ingestion_service: IngestionService) -> None:
        with pytest.raises(DocumentNotFoundError):
            await ingestion_service.process("missing", _config())

    @pytest.mark.asyncio
    async def test_missing_credentials_leave_status_uploaded(
        self,
        document_store: SQLiteDocumentStore,
        mock_vector_store: MockVectorStore,
        text_file: Path,
    ) -> None:
        service = _service(
            document_store,
            mock_vector_store,
            EmbeddingService(make_settings(openai_api_key="")),
        )
        uploaded = await service.upload(text_file, "policy.txt")

        with pytest.raises(MissingCredentialsError):
            await service.process(uploaded.document_id, _config())

        stored = await document_store.get(uploaded.document_id)
        assert stored.status == DocumentStatus.UPLOADED
        assert mock_vector_store.upsert_calls == []

    @pytest.mark.asyncio
    async def test_not_implemented_provider_leaves_status(
        self,
        document_store: SQLiteDocumentStore,
        mock_vector_store: MockVectorStore,
        settings: Settings,
        text_file: Path,
    ) -> None:
        service = _service(document_store, mock_vector_store, EmbeddingService(settings))
        uploaded = await service.upload(text_file, "policy.txt")

        with pytest.raises(ProviderNotImplementedError):
            await service.process(
                uploaded.document_id, _config(embedding_model=EmbeddingModel.HUGGINGFACE)
            )

        assert (await document_store.get(uploaded.document_id)).status == DocumentStatus.UPLOADED

    @pytest.mark.asyncio
    async def test_unconfigured_store_refuses_before_embedding(
        self,
        document_store: SQLiteDocumentStore,
        embedding_service: EmbeddingService,
        mock_embedding_provider: MockEmbeddingProvider,
        text_file: Path,
    ) -> None:
        service = _service(document_store, MockVectorStore(available=False), embedding_service)
        uploaded = await service.upload(text_file, "policy.txt")

        with pytest.raises(ConfigurationError):
            await service.process(uploaded.document_id, _config())

        assert mock_embedding_provider.calls == []
        assert (await document_store.get(uploaded.document_id)).status == DocumentStatus.UPLOADED

    @pytest.mark.asyncio
    async def test_blank_document_raises_empty_input(
        self,
        ingestion_service: IngestionService,
        document_store: SQLiteDocumentStore,
        tmp_path: Path,
    ) -> None:
        path = tmp_path / "blank.txt"
        path.write_text("   \n\n  ", encoding="utf-8")
        uploaded = await ingestion_service.upload(path, "blank.txt")
        assert uploaded.text == ""

        with pytest.raises(EmptyInputError):
            await ingestion_service.process(uploaded.document_id, _config())

        assert (await document_store.get(uploaded.document_id)).status == DocumentStatus.UPLOADED

    @pytest.mark.asyncio
    async def test_provider_error_marks_document_error(
        self,
        ingestion_service: IngestionService,
        mock_embedding_provider: MockEmbeddingProvider,
        mock_vector_store: MockVectorStore,
        document_store: SQLiteDocumentStore,
        text_file: Path,
    ) -> None:
        uploaded = await ingestion_service.upload(text_file, "policy.txt")
        mock_embedding_provider.fail_with = ProviderError(message="rate limited", chunk_index=2)

        with pytest.raises(ProviderError) as exc_info:
            await ingestion_service.process(uploaded.document_id, _config())

        assert exc_info.value.chunk_index == 2
        assert mock_vector_store.upsert_calls == []
        assert (await document_store.get(uploaded.document_id)).status == DocumentStatus.ERROR

    @pytest.mark.asyncio
    async def test_store_error_marks_document_error(
        self,
        ingestion_service: IngestionService,
        mock_vector_store: MockVectorStore,
        document_store: SQLiteDocumentStore,
        text_file: Path,
    ) -> None:
        uploaded = await ingestion_service.upload(text_file, "policy.txt")
        mock_vector_store.fail_with = StoreError(message="boom", store_status=503)

        with pytest.raises(StoreError):
            await ingestion_service.process(uploaded.document_id, _config())

        assert (await document_store.get(uploaded.document_id)).status == DocumentStatus.ERROR

    @pytest.mark.asyncio
    async def test_error_document_can_be_reprocessed(
        self,
        ingestion_service: IngestionService,
        mock_embedding_provider: MockEmbeddingProvider,
        document_store: SQLiteDocumentStore,
        text_file: Path,
    ) -> None:
        uploaded = await ingestion_service.upload(text_file, "policy.txt")
        mock_embedding_provider.fail_with = ProviderError(message="transient")
        with pytest.raises(ProviderError):
            await ingestion_service.process(uploaded.document_id, _config())

        mock_embedding_provider.fail_with = None
        result = await ingestion_service.process(uploaded.document_id, _config())

        assert result.status == DocumentStatus.PROCESSED
        assert (await document_store.get(uploaded.document_id)).status == DocumentStatus.PROCESSED

    @pytest.mark.asyncio
    async def test_deadline_aborts_before_upsert(
        self,
        document_store: SQLiteDocumentStore,
        mock_vector_store: MockVectorStore,
        settings: Settings,
        text_file: Path,
    ) -> None:
        class SlowProvider(MockEmbeddingProvider):
            async def embed(self, texts: list[str]) -> list[list[float]]:
                await asyncio.sleep(5)
                return await super().embed(texts)

        slow = SlowProvider()
        embedding_service = EmbeddingService(
            settings, factories={EmbeddingModel.OPENAI: lambda _s, _k: slow}
        )
        service = _service(document_store, mock_vector_store, embedding_service)
        uploaded = await service.upload(text_file, "policy.txt")

        with pytest.raises(DeadlineExceededError) as exc_info:
            await service.process(uploaded.document_id, _config(), deadline=0.05)

        assert exc_info.value.status_code == 504
        assert mock_vector_store.upsert_calls == []
        assert (await document_store.get(uploaded.document_id)).status == DocumentStatus.ERROR

    @pytest.mark.asyncio
    async def test_concurrent_process_calls_are_serialized(
        self,
        ingestion_service: IngestionService,
        mock_vector_store: MockVectorStore,
        document_store: SQLiteDocumentStore,
        text_file: Path,
    ) -> None:
        uploaded = await ingestion_service.upload(text_file, "policy.txt")

        results = await asyncio.gather(
            ingestion_service.process(uploaded.document_id, _config()),
            ingestion_service.process(uploaded.document_id, _config(chunk_size=300)),
        )

        assert all(r.status == DocumentStatus.PROCESSED for r in results)
        assert len(mock_vector_store.upsert_calls) == 2
        assert (await document_store.get(uploaded.document_id)).status == DocumentStatus.PROCESSED

    @pytest.mark.asyncio
    async def test_document_locks_released_after_calls(
        self,
        ingestion_service: IngestionService,
        text_file: Path,
    ) -> None:
        for i in range(50):
            with pytest.raises(DocumentNotFoundError):
                await ingestion_service.process(f"missing-{i}", _config())

        uploaded = await ingestion_service.upload(text_file, "policy.txt")
        await asyncio.gather(
            ingestion_service.process(uploaded.document_id, _config()),
            ingestion_service.process(uploaded.document_id, _config()),
        )

        assert ingestion_service._locks == {}
        assert not ingestion_service._lock_users


# ======================================================================
# Query
# ======================================================================


class TestQuery:
    @pytest.mark.asyncio
    async def test_query_unknown_document(self, ingestion_service: IngestionService) -> None:
        with pytest.raises(DocumentNotFoundError):
            await ingestion_service.query("missing", [0.1])

    @pytest.mark.asyncio
    async def test_query_unconfigured_store(
        self,
        document_store: SQLiteDocumentStore,
        embedding_service: EmbeddingService,
        text_file: Path,
    ) -> None:
        service = _service(document_store, MockVectorStore(available=False), embedding_service)
        uploaded = await service.upload(text_file, "policy.txt")

        with pytest.raises(ConfigurationError):
            await service.query(uploaded.document_id, [0.1])
