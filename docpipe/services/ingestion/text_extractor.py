"""Format dispatch for text extraction.

:class:`TextExtractor` maps a resolved file type (canonical MIME type or a
bare extension) to the source processor that understands it.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from docpipe.services.ingestion.format_detector import (
    DOC_MIME,
    DOCX_MIME,
    EXTENSION_TYPES,
    PDF_MIME,
    TEXT_MIME,
)
from docpipe.services.ingestion.source_processors import DocxProcessor, PDFProcessor, TextProcessor
from docpipe.services.ingestion.source_processors.text_processor import MAX_TEXT_BYTES
from docpipe.utils.errors import UnsupportedFormatError

logger = structlog.get_logger(logger_name=__name__)


class TextExtractor:
    """Converts a supported file into plain text.

    Parameters
    ----------
    max_text_bytes:
        Size ceiling for plain-text input.
    """

    def __init__(self, max_text_bytes: int = MAX_TEXT_BYTES) -> None:
        self._pdf_processor = PDFProcessor()
        self._docx_processor = DocxProcessor()
        self._text_processor = TextProcessor(max_bytes=max_text_bytes)

    def extract(self, file_path: str | Path, file_type: str) -> str:
        """Extract text from *file_path* using the processor for *file_type*.

        *file_type* may be a MIME type (``application/pdf``) or an
        extension (``.pdf``).  ``.doc`` shares the Word processor.

        Raises
        ------
        UnsupportedFormatError
            If *file_type* is not one of the supported formats.
        ExtractionFailedError, FileTooLargeError
            Propagated from the source processor.
        """
        mime = EXTENSION_TYPES.get(file_type.lower(), file_type.split(";", 1)[0].strip().lower())
        extractors = {
            PDF_MIME: self._pdf_processor.extract,
            DOCX_MIME: self._docx_processor.extract,
            DOC_MIME: self._docx_processor.extract,
            TEXT_MIME: self._text_processor.extract,
        }

        extractor = extractors.get(mime)
        if extractor is None:
            raise UnsupportedFormatError(message=f"No extractor available for type: {file_type}")

        logger.debug("extracting_text", file_path=str(file_path), file_type=mime)
        return extractor(str(file_path))
