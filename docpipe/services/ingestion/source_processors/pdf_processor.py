"""Source processor for PDF files.

Reads PDF files using PyMuPDF (fitz) and extracts text page-by-page, in
page order.  Pages are joined with a blank line so page breaks survive as
paragraph breaks for the paragraph chunking strategy.
"""

from __future__ import annotations

import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog

from docpipe.utils.errors import ExtractionFailedError

logger = structlog.get_logger(logger_name=__name__)


class PDFProcessor:
    """Extracts plain text from a PDF file."""

    def extract(self, file_path: str) -> str:
        """Return the whitespace-trimmed text of every page, in order.

        Raises
        ------
        ExtractionFailedError
            If the file cannot be opened as a PDF or any page fails to decode.
        """
        try:
            doc = fitz.open(file_path)
        except Exception as exc:
            logger.error("pdf_open_failed", file_path=file_path, error=str(exc))
            raise ExtractionFailedError(
                message=f"Could not open PDF: {exc}", provider_name="pymupdf"
            ) from exc

        pages: list[str] = []
        try:
            for page_num in range(len(doc)):
                try:
                    pages.append(doc[page_num].get_text("text"))
                except Exception as exc:
                    logger.error("pdf_page_failed", file_path=file_path, page=page_num + 1)
                    raise ExtractionFailedError(
                        message=f"Could not read PDF page {page_num + 1}: {exc}",
                        provider_name="pymupdf",
                    ) from exc
        finally:
            doc.close()

        text = "\n\n".join(pages).strip()
        logger.info("pdf_extracted", file_path=file_path, pages=len(pages), chars=len(text))
        return text
