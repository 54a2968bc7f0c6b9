from datetime import datetime

from app.schemas.common import CamelModel


class ExtractionMetadata(CamelModel):
    filename: str
    file_size: int
    format: str
    text_length: int
    word_count: int
    extracted_at: datetime


class ExtractedTextResponse(CamelModel):
    """Text extracted from an uploaded document."""
    success: bool = True
    text: str
    metadata: ExtractionMetadata


class SupportedFormatsResponse(CamelModel):
    documents: list[str]
    max_file_size_mb: int
