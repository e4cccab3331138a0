"""Source processors for the upload step.

Each processor converts one file format into whitespace-trimmed plain text:

    PDFProcessor     PDF via PyMuPDF, pages joined by blank lines
    DocxProcessor    Word via python-docx, text runs joined by spaces
    TextProcessor    UTF-8 text with a 100 MB ceiling
"""

from docpipe.services.ingestion.source_processors.docx_processor import DocxProcessor
from docpipe.services.ingestion.source_processors.pdf_processor import PDFProcessor
from docpipe.services.ingestion.source_processors.text_processor import TextProcessor

__all__ = ["DocxProcessor", "PDFProcessor", "TextProcessor"]
