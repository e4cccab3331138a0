"""Source processor for Word documents.

Opens the package with python-docx and scans the main document part for
``w:t`` text-run elements in document order.  lxml has already decoded XML
entities (``&amp;``, ``&lt;`` ...) by the time the text is read.  Runs are
joined with single spaces, so a word split across two runs gains a space.

Legacy binary ``.doc`` files are routed here too.  They are not OOXML
packages, so python-docx rejects them and extraction fails.
"""

from __future__ import annotations

import docx
import structlog
from docx.oxml.ns import qn

from docpipe.utils.errors import ExtractionFailedError

logger = structlog.get_logger(logger_name=__name__)

_TEXT_RUN_TAG = qn("w:t")


class DocxProcessor:
    """Extracts plain text from a ``.docx`` file."""

    def extract(self, file_path: str) -> str:
        """Return the space-joined text runs of the document body.

        Raises
        ------
        ExtractionFailedError
            If the file is not a readable Word (OOXML) package.
        """
        try:
            document = docx.Document(file_path)
        except Exception as exc:
            logger.error("docx_open_failed", file_path=file_path, error=str(exc))
            raise ExtractionFailedError(
                message=f"Could not read Word document: {exc}", provider_name="python-docx"
            ) from exc

        runs = [
            element.text
            for element in document.element.iter(_TEXT_RUN_TAG)
            if element.text
        ]
        text = " ".join(runs).strip()
        logger.info("docx_extracted", file_path=file_path, runs=len(runs), chars=len(text))
        return text
