# =============================================================================
# docpipe/cli/ingest.py: CLI for uploading and processing documents
# =============================================================================
#
# Supported subcommands:
#
#   upload   Validate a .pdf/.docx/.doc/.txt file, extract its text and store
#            it in the document database with status "uploaded".
#   process  Chunk, embed (OpenAI) and upsert (Pinecone) a stored document.
#   chunk    Extract a local file and print the chunks a process call would
#            produce.  Touches nothing but the file itself.
#
# Usage examples:
#   python -m docpipe.cli upload ./handbook.pdf
#   python -m docpipe.cli process 3f0c... --chunk-size 800 --overlap 100 \
#       --strategy paragraphs --metadata team=legal --metadata year=2024
#   python -m docpipe.cli chunk ./notes.txt --strategy sections
# =============================================================================

"""Standalone CLI for the docpipe ingestion pipeline.

Usage::

    python -m docpipe.cli upload FILE
    python -m docpipe.cli process DOCUMENT_ID [--chunk-size N] [--overlap N]
        [--strategy NAME] [--model NAME] [--metadata KEY=VALUE ...]
    python -m docpipe.cli chunk FILE [--chunk-size N] [--overlap N] [--strategy NAME]

Exit status is 0 on success and 1 on any pipeline error.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from docpipe.config.loader import load_config
from docpipe.config.settings import Settings
from docpipe.models.embedding import EmbeddingConfig
from docpipe.utils.errors import DocPipeError
from docpipe.utils.logging import configure_logging

_PREVIEW_CHARS = 80


def _build_ingestion_service(app_settings: Settings):  # noqa: ANN202
    """Construct the ingestion service plus the stores that need setup/teardown.

    Imports are deferred so ``chunk`` never loads the provider SDKs.
    """
    from docpipe.providers.document_store.sqlite_document_store import SQLiteDocumentStore
    from docpipe.providers.vector_store.pinecone_provider import PineconeVectorStore
    from docpipe.services.ingestion.chunker import TextChunker
    from docpipe.services.ingestion.embedding_service import EmbeddingService
    from docpipe.services.ingestion.ingestion_service import IngestionService
    from docpipe.services.ingestion.text_extractor import TextExtractor

    document_store = SQLiteDocumentStore(db_path=app_settings.document_db_path)
    vector_store = PineconeVectorStore(
        api_key=app_settings.pinecone_api_key,
        index_host=app_settings.pinecone_index_host,
        timeout=app_settings.pinecone_timeout_seconds,
    )
    service = IngestionService(
        document_store=document_store,
        text_extractor=TextExtractor(),
        chunker=TextChunker(),
        embedding_service=EmbeddingService(settings=app_settings),
        vector_store=vector_store,
        process_timeout=app_settings.process_timeout_seconds or None,
    )
    return service, document_store, vector_store


def _parse_metadata(pairs: list[str] | None) -> dict[str, str]:
    """Turn ``["team=legal", "year=2024"]`` into a dict; ``=`` in values is kept."""
    metadata: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise argparse.ArgumentTypeError(f"Metadata must be KEY=VALUE, got: {pair!r}")
        metadata[key.strip()] = value
    return metadata


def _config_payload(args: argparse.Namespace) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "chunkSize": args.chunk_size,
        "overlap": args.overlap,
        "chunkingStrategy": args.strategy,
    }
    if getattr(args, "model", None) is not None:
        payload["embeddingModel"] = args.model
    if getattr(args, "metadata", None):
        payload["metadata"] = _parse_metadata(args.metadata)
    return payload


def _preview(text: str) -> str:
    flat = " ".join(text.split())
    return flat if len(flat) <= _PREVIEW_CHARS else flat[: _PREVIEW_CHARS - 3] + "..."


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_upload(args: argparse.Namespace, app_settings: Settings) -> int:
    """Upload a local file into the document database."""
    service, document_store, vector_store = _build_ingestion_service(app_settings)
    try:
        await document_store.initialize()
        path = Path(args.file)
        print(f"Uploading: {path}")
        result = await service.upload(path, path.name)
    finally:
        await vector_store.close()

    print("\nUpload complete:")
    print(f"  Document ID: {result.document_id}")
    print(f"  File type:   {result.file_type}")
    print(f"  Characters:  {len(result.text)}")
    print(f"  Status:      {result.status.value}")
    return 0


async def _handle_process(
    args: argparse.Namespace,
    app_settings: Settings,
    defaults: dict[str, Any],
) -> int:
    """Process a stored document with the CLI-supplied embedding config."""
    config = EmbeddingConfig.from_payload(_config_payload(args), defaults=defaults)
    service, document_store, vector_store = _build_ingestion_service(app_settings)
    try:
        await document_store.initialize()
        print(f"Processing document: {args.document_id}")
        print(
            f"  Strategy: {config.chunking_strategy.value}  "
            f"chunk size: {config.chunk_size}  overlap: {config.overlap}  "
            f"model: {config.embedding_model.value}"
        )
        result = await service.process(args.document_id, config)
    finally:
        await vector_store.close()

    print("\nProcessing complete:")
    print(f"  Vector ID: {result.vector_id}")
    print(f"  Chunks:    {result.chunks_count}")
    print(f"  Status:    {result.status.value}")
    return 0


def _handle_chunk(args: argparse.Namespace, defaults: dict[str, Any]) -> int:
    """Extract a local file and print its chunks without storing anything."""
    from docpipe.services.ingestion.chunker import TextChunker
    from docpipe.services.ingestion.format_detector import validate_file_type
    from docpipe.services.ingestion.text_extractor import TextExtractor

    config = EmbeddingConfig.from_payload(_config_payload(args), defaults=defaults)
    path = Path(args.file)
    file_type = validate_file_type(path.name)
    text = TextExtractor().extract(path, file_type)
    chunks = TextChunker().chunk(
        text, config.chunk_size, config.overlap, config.chunking_strategy
    )

    print(f"{path.name}: {len(text)} characters -> {len(chunks)} chunks "
          f"({config.chunking_strategy.value}, size {config.chunk_size}, overlap {config.overlap})")
    for chunk in chunks:
        print(f"  [{chunk.index:>3}] {len(chunk.text):>5} chars  {_preview(chunk.text)}")
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_chunking_args(sub: argparse.ArgumentParser) -> None:
    sub.add_argument("--chunk-size", type=int, default=None, dest="chunk_size",
                     help="Chunk size in characters (100-2000)")
    sub.add_argument("--overlap", type=int, default=None,
                     help="Overlap between chunks in characters (0-500)")
    sub.add_argument("--strategy", default=None,
                     help="characters, paragraphs or sections")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ingestion CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m docpipe.cli",
        description="Upload, chunk, embed and store documents.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Pipeline commands")

    # -- upload --
    upload_parser = subparsers.add_parser("upload", help="Upload and extract a document")
    upload_parser.add_argument("file", help="Path to a .pdf, .docx, .doc or .txt file")

    # -- process --
    process_parser = subparsers.add_parser(
        "process", help="Chunk, embed and store an uploaded document"
    )
    process_parser.add_argument("document_id", help="Document ID returned by upload")
    _add_chunking_args(process_parser)
    process_parser.add_argument("--model", default=None, help="Embedding provider (openai)")
    process_parser.add_argument(
        "--metadata", action="append", metavar="KEY=VALUE",
        help="Extra metadata stored on every vector (repeatable)",
    )

    # -- chunk --
    chunk_parser = subparsers.add_parser("chunk", help="Preview chunks for a local file")
    chunk_parser.add_argument("file", help="Path to a .pdf, .docx, .doc or .txt file")
    _add_chunking_args(chunk_parser)

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse arguments, dispatch, and exit with a status code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()
    configure_logging(log_level=app_settings.log_level)
    defaults = load_config(settings=app_settings)["chunking"]

    try:
        if args.command == "upload":
            exit_code = asyncio.run(_handle_upload(args, app_settings))
        elif args.command == "process":
            exit_code = asyncio.run(_handle_process(args, app_settings, defaults))
        elif args.command == "chunk":
            exit_code = _handle_chunk(args, defaults)
        else:
            parser.print_help()
            exit_code = 1
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))
    except DocPipeError as exc:
        print(f"Error [{exc.code}]: {exc}", file=sys.stderr)
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
