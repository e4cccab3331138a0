"""Text chunking with three interchangeable boundary strategies.

Splits a document's plain text into ordered :class:`~docpipe.models.vector.TextChunk`
objects sized in characters.  Three strategies are available:

1. **characters** -- a sliding window of ``chunk_size`` characters that steps
   forward by ``chunk_size - overlap``.  Every character of the input lands
   in at least one chunk.

2. **paragraphs** -- paragraphs (blank-line separated) are packed greedily
   into a chunk until the next one would push it past ``chunk_size``.  The
   next chunk is seeded with the last ``overlap`` characters of the one just
   flushed so context carries across the boundary.  A single paragraph
   longer than ``chunk_size`` becomes one oversized chunk.

3. **sections** -- lines are grouped into sections at heading lines (longer
   than 3 characters with no lower-case letters, such as ``RETENTION`` or
   ``2024``, or ending with ``:``), then sections are packed exactly like
   paragraphs.  Text without any heading falls back to the characters
   strategy.

The chunker is synchronous and deterministic: identical inputs always give
identical output.  Unknown strategy names resolve to ``characters`` through
:class:`~docpipe.models.embedding.ChunkingStrategy`.
"""

from __future__ import annotations

from typing import Callable

import structlog

from docpipe.models.embedding import ChunkingStrategy
from docpipe.models.vector import TextChunk
from docpipe.utils.errors import EmptyInputError, InvalidConfigError

logger = structlog.get_logger(logger_name=__name__)

_PARAGRAPH_SEPARATOR = "\n\n"
_SECTION_LINE_SEPARATOR = "\n"


def is_section_header(line: str) -> bool:
    """Heading heuristic: ``INTRODUCTION`` or ``Scope:`` style lines."""
    return (line.upper() == line and len(line) > 3) or line.endswith(":")


class TextChunker:
    """Splits text into overlapping chunks under a named strategy.

    Parameters
    ----------
    section_header_detector:
        Predicate deciding whether a stripped line opens a new section.
        Defaults to :func:`is_section_header`.
    """

    def __init__(self, section_header_detector: Callable[[str], bool] = is_section_header) -> None:
        self._is_section_header = section_header_detector
        self._strategies: dict[ChunkingStrategy, Callable[[str, int, int], list[str]]] = {
            ChunkingStrategy.CHARACTERS: self._chunk_by_characters,
            ChunkingStrategy.PARAGRAPHS: self._chunk_by_paragraphs,
            ChunkingStrategy.SECTIONS: self._chunk_by_sections,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def chunk(
        self,
        text: str,
        chunk_size: int,
        overlap: int,
        strategy: ChunkingStrategy | str = ChunkingStrategy.CHARACTERS,
    ) -> list[TextChunk]:
        """Split *text* into ordered chunks.

        Parameters
        ----------
        text:
            The full document text.
        chunk_size:
            Target maximum chunk length in characters.
        overlap:
            Characters shared between consecutive chunks.
        strategy:
            ``characters``, ``paragraphs`` or ``sections``; anything else
            means ``characters``.

        Raises
        ------
        EmptyInputError
            If *text* is empty or whitespace only.
        InvalidConfigError
            If *chunk_size* is not positive or *overlap* is negative.
        """
        if not text or not text.strip():
            raise EmptyInputError()
        if chunk_size <= 0:
            raise InvalidConfigError(message=f"chunk_size must be positive, got {chunk_size}")
        if overlap < 0:
            raise InvalidConfigError(message=f"overlap must not be negative, got {overlap}")

        resolved = ChunkingStrategy(strategy)
        raw_chunks = self._strategies[resolved](text, chunk_size, overlap)
        chunks = [TextChunk(index=i, text=t) for i, t in enumerate(raw_chunks)]

        logger.debug(
            "chunking_complete",
            strategy=resolved.value,
            num_chunks=len(chunks),
            avg_chars=sum(len(c.text) for c in chunks) // max(len(chunks), 1),
        )
        return chunks

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    @staticmethod
    def _chunk_by_characters(text: str, chunk_size: int, overlap: int) -> list[str]:
        """Sliding character window stepping by ``chunk_size - overlap``."""
        if len(text) <= chunk_size:
            return [text.strip()]

        chunks: list[str] = []
        length = len(text)
        start = 0
        while start < length:
            end = min(start + chunk_size, length)
            piece = text[start:end].strip()
            if piece:
                chunks.append(piece)
            if end >= length:
                break
            next_start = max(end - overlap, 0)
            # overlap >= chunk_size would otherwise stall the window.
            start = next_start if next_start > start else end
        return chunks

    def _chunk_by_paragraphs(self, text: str, chunk_size: int, overlap: int) -> list[str]:
        paragraphs = [p.strip() for p in _normalize_newlines(text).split(_PARAGRAPH_SEPARATOR)]
        return self._accumulate([p for p in paragraphs if p], chunk_size, overlap)

    def _chunk_by_sections(self, text: str, chunk_size: int, overlap: int) -> list[str]:
        sections = self._split_sections(_normalize_newlines(text))
        if not sections:
            return self._chunk_by_characters(text, chunk_size, overlap)
        return self._accumulate(sections, chunk_size, overlap)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _split_sections(self, text: str) -> list[str]:
        """Group non-blank lines into sections; empty list when no heading exists."""
        sections: list[str] = []
        current: list[str] = []
        found_header = False

        for raw_line in text.split("\n"):
            line = raw_line.strip()
            if not line:
                continue
            if self._is_section_header(line):
                found_header = True
                if current:
                    sections.append(_SECTION_LINE_SEPARATOR.join(current))
                    current = []
            current.append(line)

        if current:
            sections.append(_SECTION_LINE_SEPARATOR.join(current))

        return sections if found_header else []

    @staticmethod
    def _accumulate(parts: list[str], chunk_size: int, overlap: int) -> list[str]:
        """Greedily pack *parts* into chunks, seeding each new chunk with overlap.

        A chunk is flushed when appending the next part would exceed
        *chunk_size*.  The following chunk starts with the last *overlap*
        characters of the flushed one, provided it is longer than *overlap*.
        """
        chunks: list[str] = []
        current = ""

        for part in parts:
            if current and len(current) + len(part) > chunk_size:
                flushed = current.strip()
                current = ""
                if flushed:
                    chunks.append(flushed)
                    if overlap > 0 and len(flushed) > overlap:
                        current = flushed[-overlap:]

            if current:
                current += _PARAGRAPH_SEPARATOR
            current += part

        tail = current.strip()
        if tail:
            chunks.append(tail)
        return chunks


def _normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")
