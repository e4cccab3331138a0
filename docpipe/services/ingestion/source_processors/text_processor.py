"""Source processor for plain-text files."""

from __future__ import annotations

from pathlib import Path

import structlog

from docpipe.utils.errors import ExtractionFailedError, FileTooLargeError

logger = structlog.get_logger(logger_name=__name__)

MAX_TEXT_BYTES = 100 * 1024 * 1024  # 100 MB


class TextProcessor:
    """Reads a UTF-8 text file, refusing files above *max_bytes*."""

    def __init__(self, max_bytes: int = MAX_TEXT_BYTES) -> None:
        self._max_bytes = max_bytes

    def extract(self, file_path: str) -> str:
        """Return the file's trimmed contents.

        Raises
        ------
        FileTooLargeError
            If the file is larger than the configured ceiling.
        ExtractionFailedError
            If the file cannot be read or is not valid UTF-8.
        """
        path = Path(file_path)
        try:
            size = path.stat().st_size
        except OSError as exc:
            raise ExtractionFailedError(message=f"Could not open file: {exc}") from exc

        if size > self._max_bytes:
            raise FileTooLargeError(
                message=f"File too large: {size} bytes (maximum: {self._max_bytes} bytes)"
            )

        try:
            # utf-8-sig drops a leading BOM that editors on Windows like to add.
            text = path.read_bytes().decode("utf-8-sig")
        except OSError as exc:
            raise ExtractionFailedError(message=f"Could not read file: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise ExtractionFailedError(message=f"File is not valid UTF-8: {exc}") from exc

        text = text.strip()
        logger.info("text_extracted", file_path=file_path, bytes=size, chars=len(text))
        return text
