from typing import Literal

from pydantic import Field

from app.schemas.common import CamelModel

SourceType = Literal["website", "book", "journal", "newspaper", "video"]


class ManualCitationData(CamelModel):
    """Bibliographic fields typed in by the student."""
    title: str | None = None
    author: str | None = None
    publisher: str | None = None
    publication_date: str | None = None
    url: str | None = None
    site_name: str | None = None
    description: str | None = None
    isbn: str | None = None


class CitationInput(CamelModel):
    text: str | None = None
    url: str | None = None
    source_type: SourceType | Literal["auto"] | None = None
    manual_data: ManualCitationData | None = None


class CitationRequestBody(CitationInput):
    """A single citation request, or a batch under ``citations``."""
    citations: list[CitationInput] | None = None


class CitationSchema(CamelModel):
    in_text: str
    works_cited: str
    source_type: str
    confidence: int = Field(ge=0, le=100)
    warning: str | None = None


class CitationResponse(CamelModel):
    success: bool = True
    citation: CitationSchema


class CitationBatchResponse(CamelModel):
    success: bool = True
    citations: list[CitationSchema]
    count: int


class ScrapeRequest(CamelModel):
    url: str = ""


class CitationMetadataResponse(CamelModel):
    title: str
    author: str
    publisher: str
    publication_date: str | None = None
    url: str
    site_name: str
    description: str | None = None
    last_modified: str | None = None


class ExportRequest(CamelModel):
    citations: list[CitationSchema]


class ExportResponse(CamelModel):
    success: bool = True
    text: str
