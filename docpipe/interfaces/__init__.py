"""Public interface definitions for all external service providers.

Every external service in the pipeline is accessed through the abstract base
classes in this package.  Concrete adapters live in ``docpipe/providers/`` and
are wired together in ``docpipe/main.py``.

CONCRETE PROVIDER MAP:
    Interface              →  Concrete implementations (in docpipe/providers/)
    ─────────────────────────────────────────────────────────────────────
    IEmbeddingProvider     →  OpenAIEmbeddingProvider,
                              HuggingFaceEmbeddingProvider (reserved)
    IVectorStoreProvider   →  PineconeVectorStore
    IDocumentStore         →  SQLiteDocumentStore
"""

from docpipe.interfaces.document_store import IDocumentStore
from docpipe.interfaces.embedding_provider import IEmbeddingProvider
from docpipe.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IDocumentStore",
    "IEmbeddingProvider",
    "IVectorStoreProvider",
]
