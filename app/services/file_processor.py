"""
File processor service for extracting plain text from uploaded documents.
Supports: PDF, Word (.docx) and plain text.
"""

import enum
import io
from dataclasses import dataclass
from pathlib import Path

import PyPDF2
from docx import Document as WordDocument

from app.core.config import settings
from app.core.exceptions import (
    ExtractionFailedError,
    FileTooLargeError,
    UnsupportedFormatError,
)
from app.core.logging_config import get_logger

logger = get_logger(__name__)


class DocumentFormat(str, enum.Enum):
    PDF = "pdf"
    DOCX = "docx"
    TXT = "txt"
    UNSUPPORTED = "unsupported"


EXTENSION_FORMATS = {
    ".pdf": DocumentFormat.PDF,
    ".docx": DocumentFormat.DOCX,
    ".txt": DocumentFormat.TXT,
}

SUPPORTED_EXTENSIONS = tuple(EXTENSION_FORMATS)


def max_file_size() -> int:
    return settings.max_upload_size_mb * 1024 * 1024


def infer_format(filename: str) -> DocumentFormat:
    """Resolve a filename to its format tag by case-insensitive suffix."""
    ext = Path(filename or "").suffix.lower()
    return EXTENSION_FORMATS.get(ext, DocumentFormat.UNSUPPORTED)


@dataclass(frozen=True)
class UploadedDocument:
    """An uploaded file, alive for the duration of one request."""

    content: bytes
    filename: str

    @property
    def format(self) -> DocumentFormat:
        return infer_format(self.filename)

    @property
    def extension(self) -> str:
        return Path(self.filename).suffix.lower()


def validate_file(document: UploadedDocument) -> None:
    """Validate file size and extension before any extractor runs."""
    file_size_mb = len(document.content) / (1024 * 1024)
    logger.debug(f"Validating file: {document.filename}, size: {file_size_mb:.2f} MB")

    if len(document.content) > max_file_size():
        logger.warning(f"File too large: {document.filename} ({file_size_mb:.2f} MB)")
        raise FileTooLargeError(
            f"File too large. Maximum size is {settings.max_upload_size_mb}MB. "
            f"Your file is {file_size_mb:.1f}MB"
        )

    if document.format is DocumentFormat.UNSUPPORTED:
        ext = document.extension or "(none)"
        logger.warning(f"Unsupported file type: {ext} for file {document.filename}")
        raise UnsupportedFormatError(
            f"Unsupported file type: {ext}. Supported: {', '.join(SUPPORTED_EXTENSIONS)}"
        )


def extract_text_from_pdf(file_content: bytes) -> str:
    """Extract text from a PDF, page by page."""
    try:
        pdf_reader = PyPDF2.PdfReader(io.BytesIO(file_content))
    except Exception as e:
        logger.error(f"PDF could not be opened: {e}")
        raise ExtractionFailedError(f"Failed to extract text from PDF: {e}", details=str(e))

    if pdf_reader.is_encrypted:
        # Many "protected" PDFs only carry an owner password
        try:
            decrypted = pdf_reader.decrypt("")
        except Exception as e:
            raise ExtractionFailedError("Failed to extract text from PDF: PDF is encrypted", details=str(e))
        if not decrypted:
            logger.warning("Encrypted PDF rejected: empty password did not unlock it")
            raise ExtractionFailedError("Failed to extract text from PDF: PDF is encrypted")

    try:
        text_parts = []
        page_count = len(pdf_reader.pages)
        logger.debug(f"Processing PDF with {page_count} pages")
        for page in pdf_reader.pages:
            text = page.extract_text()
            if text and text.strip():
                text_parts.append(text.strip())
        logger.debug(f"Extracted text from {len(text_parts)} of {page_count} pages")
        return "\n\n".join(text_parts)
    except Exception as e:
        logger.error(f"PDF extraction failed: {e}")
        raise ExtractionFailedError(f"Failed to extract text from PDF: {e}", details=str(e))


def extract_text_from_docx(file_content: bytes) -> str:
    """Extract raw text from a Word document (.docx); formatting is ignored."""
    try:
        doc = WordDocument(io.BytesIO(file_content))
        text_parts = [p.text for p in doc.paragraphs if p.text.strip()]
        # Tables come out as one text run per row
        for table in doc.tables:
            for row in table.rows:
                row_text = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if row_text:
                    text_parts.append(" | ".join(row_text))
        return "\n\n".join(text_parts)
    except Exception as e:
        logger.error(f"DOCX extraction failed: {e}")
        raise ExtractionFailedError(f"Failed to extract text from Word document: {e}", details=str(e))


def extract_text_from_text_file(file_content: bytes) -> str:
    """Decode a plain text file as UTF-8, replacing undecodable bytes."""
    return file_content.decode("utf-8-sig", errors="replace")


def extract_text(file_content: bytes, filename: str) -> str:
    """
    Extract the text content of an uploaded file.

    Args:
        file_content: Raw bytes of the file
        filename: Original filename (its suffix selects the extractor)

    Returns:
        Extracted text, stripped

    Raises:
        FileTooLargeError: content exceeds the upload limit
        UnsupportedFormatError: no extractor for the suffix
        ExtractionFailedError: the extractor could not produce any text
    """
    document = UploadedDocument(content=file_content, filename=filename or "")
    logger.info(f"Processing file: {document.filename} ({document.format.value})")
    validate_file(document)

    fmt = document.format
    if fmt is DocumentFormat.PDF:
        text = extract_text_from_pdf(document.content)
    elif fmt is DocumentFormat.DOCX:
        text = extract_text_from_docx(document.content)
    elif fmt is DocumentFormat.TXT:
        text = extract_text_from_text_file(document.content)
    else:
        raise UnsupportedFormatError(f"Unsupported file type: {document.extension or '(none)'}")

    text = text.strip()
    if not text:
        logger.warning(f"No text extracted from {document.filename}")
        raise ExtractionFailedError(f"No text content found in the {fmt.value.upper()} file")

    logger.info(f"Extracted {len(text)} characters from {document.filename}")
    return text


def get_supported_formats() -> dict:
    """Return information about supported file formats."""
    return {
        "documents": list(SUPPORTED_EXTENSIONS),
        "max_file_size_mb": settings.max_upload_size_mb,
    }
