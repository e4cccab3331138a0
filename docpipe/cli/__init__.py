# =============================================================================
# docpipe/cli/__init__.py: CLI Module Overview
# =============================================================================
#
# Command-line access to the same ingestion pipeline the HTTP API exposes,
# for operators who want to load documents without running the server.
#
#   upload   Validate and extract a local file, store it as a Document
#   process  Chunk, embed and upsert a stored Document into the vector index
#   chunk    Dry-run: extract a local file and print the chunks it would yield
#
# Architecture Notes:
#   - argparse, like the rest of the project's tooling.
#   - Each invocation builds its own IngestionService in ingest.py with
#     deferred imports, so `chunk` never loads provider SDKs and nothing
#     here imports docpipe.main (which builds the app at import time).
#     The CLI and the server share one SQLite document database through
#     DOCUMENT_DB_PATH.
# =============================================================================

"""CLI tools for the docpipe pipeline.

- ``python -m docpipe.cli upload FILE``
- ``python -m docpipe.cli process DOCUMENT_ID [--chunk-size N --overlap N ...]``
- ``python -m docpipe.cli chunk FILE``
"""
