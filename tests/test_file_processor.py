"""Tests for format dispatch and the PDF/DOCX/TXT extractors."""

import io

import pytest
import PyPDF2

from app.core.config import settings
from app.core.exceptions import ExtractionFailedError, FileTooLargeError, UnsupportedFormatError
from app.services.file_processor import DocumentFormat, extract_text, get_supported_formats, infer_format


# ── Format dispatch ──────────────────────────────────────────


class TestInferFormat:
    @pytest.mark.parametrize("filename,expected", [
        ("syllabus.pdf", DocumentFormat.PDF),
        ("SYLLABUS.PDF", DocumentFormat.PDF),
        ("notes.Docx", DocumentFormat.DOCX),
        ("readme.txt", DocumentFormat.TXT),
        ("archive.tar.txt", DocumentFormat.TXT),
        ("slides.pptx", DocumentFormat.UNSUPPORTED),
        ("notes.md", DocumentFormat.UNSUPPORTED),
        ("legacy.doc", DocumentFormat.UNSUPPORTED),
        ("no_extension", DocumentFormat.UNSUPPORTED),
        ("", DocumentFormat.UNSUPPORTED),
    ])
    def test_suffix_resolution(self, filename, expected):
        assert infer_format(filename) is expected

    @pytest.mark.parametrize("filename", ["image.png", "data.csv", "book.epub", "page.html", "Makefile"])
    def test_unrecognized_suffix_is_rejected(self, filename):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            extract_text(b"whatever", filename)
        assert ".pdf" in exc_info.value.message

    def test_supported_formats(self):
        formats = get_supported_formats()
        assert formats["documents"] == [".pdf", ".docx", ".txt"]
        assert formats["max_file_size_mb"] == settings.max_upload_size_mb


# ── PDF ──────────────────────────────────────────────────────


class TestPdfExtraction:
    def test_extracts_page_text(self, make_pdf):
        text = extract_text(make_pdf("Intro to Calculus with Dr. Rivera"), "syllabus.pdf")
        assert "Calculus" in text
        assert "Rivera" in text

    def test_malformed_pdf_fails_cleanly(self):
        with pytest.raises(ExtractionFailedError) as exc_info:
            extract_text(b"this is not a pdf at all", "broken.pdf")
        assert exc_info.value.message.startswith("Failed to extract text from PDF")

    def test_encrypted_pdf_fails_cleanly(self):
        writer = PyPDF2.PdfWriter()
        writer.add_blank_page(width=72, height=72)
        writer.encrypt("secret")
        buffer = io.BytesIO()
        writer.write(buffer)

        with pytest.raises(ExtractionFailedError) as exc_info:
            extract_text(buffer.getvalue(), "locked.pdf")
        assert "encrypted" in exc_info.value.message

    def test_pdf_without_text(self):
        writer = PyPDF2.PdfWriter()
        writer.add_blank_page(width=72, height=72)
        buffer = io.BytesIO()
        writer.write(buffer)

        with pytest.raises(ExtractionFailedError) as exc_info:
            extract_text(buffer.getvalue(), "blank.pdf")
        assert exc_info.value.message == "No text content found in the PDF file"


# ── DOCX ─────────────────────────────────────────────────────


class TestDocxExtraction:
    def test_extracts_paragraphs_and_tables(self, make_docx):
        content = make_docx(
            ["CHEM 101", "", "Office hours: Tuesdays"],
            table_rows=[["Week", "Topic"], ["1", "Atoms"]],
        )
        text = extract_text(content, "chem.docx")

        assert text.startswith("CHEM 101")
        assert "Office hours: Tuesdays" in text
        assert "Week | Topic" in text
        assert "1 | Atoms" in text

    def test_invalid_docx(self):
        with pytest.raises(ExtractionFailedError):
            extract_text(b"PK\x03\x04 definitely not a zip", "broken.docx")


# ── TXT ──────────────────────────────────────────────────────


class TestTextExtraction:
    def test_utf8(self):
        assert extract_text("Café schedule\n".encode("utf-8"), "notes.txt") == "Café schedule"

    def test_bom_is_dropped(self):
        assert extract_text(b"\xef\xbb\xbfWeek 1", "notes.txt") == "Week 1"

    def test_undecodable_bytes_are_replaced(self):
        text = extract_text(b"Exam \xff on Friday", "notes.txt")
        assert text.startswith("Exam ")
        assert text.endswith("on Friday")

    def test_whitespace_only(self):
        with pytest.raises(ExtractionFailedError):
            extract_text(b"   \n\t ", "empty.txt")


class TestSizeLimit:
    def test_oversized_file_is_rejected(self, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_size_mb", 0)
        with pytest.raises(FileTooLargeError) as exc_info:
            extract_text(b"some text", "notes.txt")
        assert exc_info.value.status_code == 413
