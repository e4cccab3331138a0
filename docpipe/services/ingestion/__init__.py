"""Document ingestion pipeline.

Upload: **validate -> extract -> persist**.  Process: **chunk -> embed -> store**.

1. **Validate** (format_detector.py) -- Extension and declared content type
   are checked against the four accepted formats before any parsing.

2. **Extract** (text_extractor.py / TextExtractor) -- Format-specific source
   processors turn PDF, Word and plain-text files into trimmed plain text.

3. **Chunk** (chunker.py / TextChunker) -- Splits the text by characters,
   paragraphs or sections with a configurable overlap.

4. **Embed** (embedding_service.py / EmbeddingService) -- Picks the embedding
   provider named in the request and embeds chunks one by one, in order.

5. **Store** (via IVectorStoreProvider) -- Upserts one vector per chunk into
   the document's own namespace.

The IngestionService class orchestrates the stages and owns document status.
"""

from docpipe.services.ingestion.chunker import TextChunker
from docpipe.services.ingestion.embedding_service import EmbeddingService
from docpipe.services.ingestion.ingestion_service import IngestionService
from docpipe.services.ingestion.text_extractor import TextExtractor

__all__ = [
    "EmbeddingService",
    "IngestionService",
    "TextChunker",
    "TextExtractor",
]
