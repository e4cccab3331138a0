"""Vector store provider implementations."""

from docpipe.providers.vector_store.pinecone_provider import PineconeVectorStore

__all__ = ["PineconeVectorStore"]
