"""docpipe: document ingestion and vectorization pipeline."""

__version__ = "0.1.0"
