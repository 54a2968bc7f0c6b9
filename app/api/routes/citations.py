from dataclasses import asdict

from fastapi import APIRouter, Request

from app.core.config import settings
from app.core.rate_limit import limiter
from app.schemas.citation import (
    CitationBatchResponse,
    CitationInput,
    CitationMetadataResponse,
    CitationRequestBody,
    CitationResponse,
    CitationSchema,
    ExportRequest,
    ExportResponse,
    ScrapeRequest,
)
from app.services.citation_service import (
    Citation,
    CitationRequest,
    cite,
    cite_many,
    format_citations_for_export,
)
from app.services.web_scraper import scrape_citation_metadata

router = APIRouter(prefix="/citations", tags=["Citations"])


def to_citation_request(item: CitationInput) -> CitationRequest:
    return CitationRequest(
        text=item.text,
        url=item.url,
        source_type=None if item.source_type == "auto" else item.source_type,
        manual_data=item.manual_data.model_dump(exclude_none=True) if item.manual_data else None,
    )


def to_schema(citation: Citation) -> CitationSchema:
    return CitationSchema(**asdict(citation))


@router.post("", response_model=CitationResponse | CitationBatchResponse)
@limiter.limit(settings.ai_rate_limit)
async def generate_citation(request: Request, body: CitationRequestBody):
    """
    Generate an MLA citation, or one per entry when ``citations`` is given.

    Internal failures come back as low-confidence placeholder citations with a
    warning; only a request without any input is rejected.
    """
    if body.citations is not None:
        citations = await cite_many([to_citation_request(item) for item in body.citations])
        return CitationBatchResponse(
            citations=[to_schema(c) for c in citations],
            count=len(citations),
        )

    citation = await cite(to_citation_request(body))
    return CitationResponse(citation=to_schema(citation))


@router.post("/scrape", response_model=CitationMetadataResponse)
@limiter.limit(settings.ai_rate_limit)
async def scrape_citation(request: Request, body: ScrapeRequest):
    """Read title, author, publisher and dates from a web page."""
    metadata = await scrape_citation_metadata(body.url)
    return CitationMetadataResponse(**metadata.to_dict())


@router.post("/export", response_model=ExportResponse)
def export_citations(body: ExportRequest):
    """Format citations as a numbered works-cited list followed by in-text forms."""
    citations = [Citation(**c.model_dump()) for c in body.citations]
    return ExportResponse(text=format_citations_for_export(citations))
