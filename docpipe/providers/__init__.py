"""Concrete adapters for embedding APIs, vector stores and document persistence."""
