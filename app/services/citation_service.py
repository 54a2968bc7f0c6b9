"""
Citation Service: MLA citations from a text excerpt, a URL or manual metadata.

Availability contract: once the request carries some input, ``cite`` always
returns a Citation. Any internal failure (AI unavailable, malformed AI reply,
unexpected error) is converted to a placeholder with confidence 20 and a
warning. Missing input is the only error a caller can receive.
"""
import asyncio
import re
from dataclasses import dataclass, field
from datetime import date, datetime

from app.core.exceptions import InvalidInputError
from app.core.logging_config import get_logger
from app.services import ai_service
from app.services.web_scraper import (
    UNKNOWN_AUTHOR,
    UNKNOWN_PUBLISHER,
    UNKNOWN_SITE,
    CitationMetadata,
    fallback_metadata,
    scrape_citation_metadata,
    validate_url,
)

logger = get_logger(__name__)

SOURCE_TYPES = ("website", "book", "journal", "newspaper", "video")

BOOK_PATTERN = re.compile(r"\bbooks?\b")

PLACEHOLDER_CONFIDENCE = 20
DETERMINISTIC_CONFIDENCE = 85
DEFAULT_AI_CONFIDENCE = 70

PLACEHOLDER_WARNING = (
    "This citation could not be generated automatically. "
    "Please verify the source details before using it."
)

MLA_MONTHS = (
    "Jan.", "Feb.", "Mar.", "Apr.", "May", "June",
    "July", "Aug.", "Sept.", "Oct.", "Nov.", "Dec.",
)

CITATION_SYSTEM_PROMPT = (
    "You are a meticulous academic librarian. You format citations following the "
    "MLA 9th edition exactly and always answer with a single valid JSON object."
)


@dataclass
class CitationRequest:
    text: str | None = None
    url: str | None = None
    source_type: str | None = None
    manual_data: dict | None = None

    def has_input(self) -> bool:
        manual = {k: v for k, v in (self.manual_data or {}).items() if v}
        return bool((self.text and self.text.strip()) or (self.url and self.url.strip()) or manual)


@dataclass
class Citation:
    in_text: str
    works_cited: str
    source_type: str
    confidence: int
    warning: str | None = None


@dataclass
class _Resolved:
    metadata: CitationMetadata
    source_type: str
    notes: list[str] = field(default_factory=list)


def _shorten(text: str, limit: int = 100) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 3].rstrip() + "..."


def format_mla_date(value: str | None) -> str:
    """Render an ISO date as MLA day-month-year; anything else passes through."""
    if not value:
        return "n.d."
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return value.strip()
    return f"{parsed.day} {MLA_MONTHS[parsed.month - 1]} {parsed.year}"


def metadata_from_manual(data: dict) -> CitationMetadata:
    url = data.get("url") or ""
    return CitationMetadata(
        title=data.get("title") or "Untitled",
        author=data.get("author") or UNKNOWN_AUTHOR,
        publisher=data.get("publisher") or UNKNOWN_PUBLISHER,
        publication_date=data.get("publication_date"),
        url=url,
        site_name=data.get("site_name") or UNKNOWN_SITE,
        description=data.get("description"),
        last_modified=data.get("last_modified"),
    )


def metadata_from_text(text: str) -> CitationMetadata:
    return CitationMetadata(
        title=_shorten(text),
        description=_shorten(text, 200),
        last_modified=date.today().isoformat(),
    )


def detect_source_type(metadata: CitationMetadata, manual_data: dict | None = None) -> str:
    """Classify a source from URL domain patterns and bibliographic fields."""
    url = metadata.url.lower()
    title = metadata.title.lower()
    site_name = metadata.site_name.lower()

    if "youtube.com" in url or "youtu.be" in url:
        return "video"
    if "news" in url or "news" in site_name or "news" in title:
        return "newspaper"
    if any(marker in url for marker in ("jstor", "scholar", "academic", "doi.org", "journal")):
        return "journal"
    if (
        "amazon" in url
        or BOOK_PATTERN.search(url)
        or BOOK_PATTERN.search(title)
        or (manual_data or {}).get("isbn")
    ):
        return "book"
    return "website"


def _last_name(author: str) -> str:
    author = author.strip()
    if "," in author:
        return author.split(",")[0].strip()
    parts = author.split()
    return parts[-1] if parts else author


def has_complete_metadata(metadata: CitationMetadata) -> bool:
    return (
        metadata.author != UNKNOWN_AUTHOR
        and metadata.title != "Untitled"
        and bool(metadata.publication_date)
    )


def format_in_text(metadata: CitationMetadata) -> str:
    if metadata.author != UNKNOWN_AUTHOR:
        return f"({_last_name(metadata.author)})"
    return f'("{_shorten(metadata.title, 40)}")'


def format_works_cited(metadata: CitationMetadata, source_type: str) -> str:
    """Deterministic MLA works-cited entry for the given source type."""
    author = f"{metadata.author}. " if metadata.author != UNKNOWN_AUTHOR else ""
    title = metadata.title
    container = metadata.site_name if metadata.site_name != UNKNOWN_SITE else metadata.publisher
    when = format_mla_date(metadata.publication_date)
    location = f", {metadata.url}" if metadata.url else ""

    if source_type == "book":
        return f"{author}{title}. {metadata.publisher}, {when}."
    if source_type == "video":
        return f'"{title}." {container}, {when}{location}.'
    if source_type in ("journal", "newspaper"):
        return f'{author}"{title}." {container}, {when}{location}.'

    entry = f'{author}"{title}." {container}, {when}{location}.'
    if metadata.url:
        today = date.today()
        entry += f" Accessed {today.day} {MLA_MONTHS[today.month - 1]} {today.year}."
    return entry


def placeholder_citation(request: CitationRequest) -> Citation:
    """The fixed degraded result substituted for a failed citation."""
    label = "Source"
    if request.manual_data and request.manual_data.get("title"):
        label = _shorten(request.manual_data["title"], 60)
    elif request.text and request.text.strip():
        label = _shorten(request.text, 60)
    elif request.url and request.url.strip():
        label = request.url.strip()

    source_type = request.source_type if request.source_type in SOURCE_TYPES else "website"
    return Citation(
        in_text=f'("{label}")',
        works_cited=f'"{label}." {UNKNOWN_PUBLISHER}, n.d.',
        source_type=source_type,
        confidence=PLACEHOLDER_CONFIDENCE,
        warning=PLACEHOLDER_WARNING,
    )


async def resolve_metadata(request: CitationRequest) -> _Resolved:
    notes = []
    if request.url and request.url.strip():
        url = validate_url(request.url)
        try:
            metadata = await scrape_citation_metadata(url)
        except Exception as e:
            logger.warning(f"Metadata scrape failed, using URL-derived metadata | url={url} | error={e}")
            metadata = fallback_metadata(url)
            notes.append("Source page could not be read; details were derived from the URL.")
        if request.manual_data:
            # Fields typed by the student override what the page says
            manual = metadata_from_manual(request.manual_data)
            for name, value in vars(manual).items():
                if request.manual_data.get(name):
                    setattr(metadata, name, value)
    elif request.manual_data and any(request.manual_data.values()):
        metadata = metadata_from_manual(request.manual_data)
    else:
        metadata = metadata_from_text(request.text or "")

    if request.source_type in SOURCE_TYPES:
        source_type = request.source_type
    else:
        source_type = detect_source_type(metadata, request.manual_data)
    return _Resolved(metadata=metadata, source_type=source_type, notes=notes)


def build_citation_prompt(metadata: CitationMetadata, source_type: str) -> str:
    lines = [
        "Generate an accurate MLA citation for the following source:",
        "",
        f"Source Type: {source_type}",
        f"Title: {metadata.title}",
        f"Author: {metadata.author}",
        f"Publisher/Site: {metadata.publisher}",
        f"Publication Date: {metadata.publication_date or 'unknown'}",
        f"URL: {metadata.url or 'none'}",
        f"Site Name: {metadata.site_name}",
    ]
    if metadata.description:
        lines.append(f"Description: {metadata.description}")
    if metadata.last_modified:
        lines.append(f"Last Modified: {metadata.last_modified}")
    lines += [
        "",
        "Follow the MLA 9th edition. If the author is \"Unknown Author\", use the title for the "
        "in-text citation. If the publication date is unknown, use \"n.d.\". For websites, include "
        "the access date when the publication date is unclear.",
        "",
        "Respond with JSON only:",
        '{"inText": "...", "worksCited": "...", "sourceType": "' + source_type + '", "confidence": 0-100}',
    ]
    return "\n".join(lines)


def _clamp_confidence(value) -> int:
    try:
        return max(0, min(100, int(value)))
    except (TypeError, ValueError):
        return DEFAULT_AI_CONFIDENCE


async def generate_citation_with_ai(metadata: CitationMetadata, source_type: str) -> Citation:
    answer = await ai_service.generate_content(
        build_citation_prompt(metadata, source_type),
        CITATION_SYSTEM_PROMPT,
        max_tokens=600,
        temperature=0.2,
    )
    data = ai_service.parse_json_reply(answer.answer)
    if not isinstance(data, dict):
        raise ValueError("Citation reply is not a JSON object")

    reply_type = data.get("sourceType")
    return Citation(
        in_text=str(data.get("inText") or format_in_text(metadata)),
        works_cited=str(data.get("worksCited") or format_works_cited(metadata, source_type)),
        source_type=reply_type if reply_type in SOURCE_TYPES else source_type,
        confidence=_clamp_confidence(data.get("confidence", DEFAULT_AI_CONFIDENCE)),
    )


async def _build_citation(request: CitationRequest) -> Citation:
    resolved = await resolve_metadata(request)
    metadata, source_type = resolved.metadata, resolved.source_type

    if has_complete_metadata(metadata):
        logger.info(f"Formatting citation locally | source_type={source_type}")
        citation = Citation(
            in_text=format_in_text(metadata),
            works_cited=format_works_cited(metadata, source_type),
            source_type=source_type,
            confidence=DETERMINISTIC_CONFIDENCE,
        )
    else:
        logger.info(f"Generating citation with AI | source_type={source_type}")
        citation = await generate_citation_with_ai(metadata, source_type)

    if resolved.notes:
        citation.warning = " ".join(resolved.notes)
    return citation


async def cite(request: CitationRequest) -> Citation:
    """
    Build an MLA citation.

    Raises:
        InvalidInputError: none of text, url or manual data was supplied
    """
    if not request.has_input():
        raise InvalidInputError("Provide text, url or manualData to generate a citation")

    try:
        return await _build_citation(request)
    except Exception as e:
        # Degraded-success contract: every internal failure becomes a placeholder
        logger.warning(f"Citation generation failed, returning placeholder | error={e}")
        return placeholder_citation(request)


async def _cite_or_placeholder(request: CitationRequest) -> Citation:
    try:
        return await cite(request)
    except InvalidInputError:
        logger.info("Batch citation entry had no input, returning placeholder")
        return placeholder_citation(request)


async def cite_many(requests: list[CitationRequest]) -> list[Citation]:
    """Cite each request independently; output order matches input order."""
    if not requests:
        raise InvalidInputError("Provide at least one citation request")
    logger.info(f"Generating {len(requests)} citations")
    return list(await asyncio.gather(*(_cite_or_placeholder(r) for r in requests)))


def format_citations_for_export(citations: list[Citation]) -> str:
    works_cited = "\n\n".join(f"{i}. {c.works_cited}" for i, c in enumerate(citations, 1))
    in_text = "\n".join(f"{i}. {c.in_text}" for i, c in enumerate(citations, 1))
    return f"WORKS CITED\n\n{works_cited}\n\nIN-TEXT CITATIONS\n\n{in_text}"
