"""Upload format validation.

Decides from a file name and optional declared content-type whether an
upload is something the text extractor can handle.  Pure function, no I/O.
The extension is authoritative; a declared content-type is only checked
when it is present.
"""

from __future__ import annotations

from pathlib import PurePath

from docpipe.utils.errors import UnsupportedFormatError

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MIME = "application/msword"
TEXT_MIME = "text/plain"

# Extension -> canonical MIME type stored on the Document.
EXTENSION_TYPES: dict[str, str] = {
    ".pdf": PDF_MIME,
    ".docx": DOCX_MIME,
    ".doc": DOC_MIME,
    ".txt": TEXT_MIME,
}

ALLOWED_CONTENT_TYPES = frozenset(EXTENSION_TYPES.values())


def file_extension(file_name: str) -> str:
    """Return the lowercased extension of *file_name*, including the dot.

    The extension is everything from the last ``.`` of the base name, so a
    file called just ``.txt`` has the extension ``.txt``.
    """
    _, dot, ext = PurePath(file_name).name.rpartition(".")
    return f".{ext.lower()}" if dot else ""


def validate_file_type(file_name: str, content_type: str | None = None) -> str:
    """Validate an upload and return its canonical MIME type.

    Parameters
    ----------
    file_name:
        Original file name; only its extension is inspected.
    content_type:
        Declared content-type from the upload, if any.  Parameters such as
        ``; charset=utf-8`` are ignored.

    Raises
    ------
    UnsupportedFormatError
        If the extension is not ``.pdf``, ``.docx``, ``.doc`` or ``.txt``, or
        a non-empty content-type is not one of the four matching MIME types.
    """
    ext = file_extension(file_name)
    resolved = EXTENSION_TYPES.get(ext)
    if resolved is None:
        allowed = ", ".join(EXTENSION_TYPES)
        raise UnsupportedFormatError(
            message=f"Extension not allowed: {ext or '(none)'}. Allowed extensions: {allowed}"
        )

    if content_type and content_type.strip():
        mime = content_type.split(";", 1)[0].strip().lower()
        if mime not in ALLOWED_CONTENT_TYPES:
            raise UnsupportedFormatError(message=f"Content type not allowed: {content_type}")

    return resolved
