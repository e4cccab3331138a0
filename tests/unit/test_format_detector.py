"""Unit tests for upload format validation."""

from __future__ import annotations

import pytest

from docpipe.services.ingestion.format_detector import (
    DOC_MIME,
    DOCX_MIME,
    PDF_MIME,
    TEXT_MIME,
    file_extension,
    validate_file_type,
)
from docpipe.utils.errors import UnsupportedFormatError


class TestValidateFileType:
    @pytest.mark.parametrize(
        ("file_name", "expected"),
        [
            ("report.pdf", PDF_MIME),
            ("memo.docx", DOCX_MIME),
            ("legacy.doc", DOC_MIME),
            ("notes.txt", TEXT_MIME),
            ("SHOUTING.PDF", PDF_MIME),
            ("archive.2024.Txt", TEXT_MIME),
            (".txt", TEXT_MIME),
        ],
    )
    def test_accepted_extensions(self, file_name: str, expected: str) -> None:
        assert validate_file_type(file_name) == expected

    @pytest.mark.parametrize("file_name", ["setup.exe", "image.png", "README", "notes.txt.zip", ".pdf.bak"])
    def test_rejected_extensions(self, file_name: str) -> None:
        with pytest.raises(UnsupportedFormatError):
            validate_file_type(file_name)

    def test_matching_content_type_accepted(self) -> None:
        assert validate_file_type("report.pdf", "application/pdf") == PDF_MIME

    def test_content_type_parameters_ignored(self) -> None:
        assert validate_file_type("notes.txt", "text/plain; charset=utf-8") == TEXT_MIME

    def test_blank_content_type_means_absent(self) -> None:
        assert validate_file_type("notes.txt", "   ") == TEXT_MIME

    def test_disallowed_content_type_rejected(self) -> None:
        with pytest.raises(UnsupportedFormatError, match="Content type"):
            validate_file_type("report.pdf", "application/octet-stream")

    def test_extension_is_authoritative_among_allowed_types(self) -> None:
        # Any allowed content type passes; the stored type follows the extension.
        assert validate_file_type("memo.docx", "text/plain") == DOCX_MIME

    def test_error_code(self) -> None:
        with pytest.raises(UnsupportedFormatError) as exc_info:
            validate_file_type("payload.exe")
        assert exc_info.value.code == "UNSUPPORTED_FORMAT"
        assert exc_info.value.status_code == 415


class TestFileExtension:
    def test_lowercased_with_dot(self) -> None:
        assert file_extension("A.DOCX") == ".docx"

    def test_no_extension(self) -> None:
        assert file_extension("Makefile") == ""

    def test_bare_dot_name_is_extension(self) -> None:
        assert file_extension(".txt") == ".txt"
        assert file_extension("uploads/.PDF") == ".pdf"

    def test_directory_dots_ignored(self) -> None:
        assert file_extension("release.v2/Makefile") == ""
