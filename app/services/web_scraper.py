"""
Web page metadata extraction for citations.
Fetches a source URL and reads title, author, publisher and dates from its HTML.
"""
import ipaddress
from dataclasses import dataclass, asdict
from datetime import date
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from app.core.config import settings
from app.core.exceptions import InvalidInputError, ScrapeFailedError
from app.core.logging_config import get_logger

logger = get_logger(__name__)

MAX_CONTENT_SIZE = 5 * 1024 * 1024  # 5 MB of HTML is plenty for a <head>

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

UNKNOWN_AUTHOR = "Unknown Author"
UNKNOWN_PUBLISHER = "Unknown Publisher"
UNKNOWN_SITE = "Unknown Site"


@dataclass
class CitationMetadata:
    title: str
    author: str = UNKNOWN_AUTHOR
    publisher: str = UNKNOWN_PUBLISHER
    publication_date: str | None = None
    url: str = ""
    site_name: str = UNKNOWN_SITE
    description: str | None = None
    last_modified: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


def extract_domain_name(url: str) -> str:
    host = urlparse(url).hostname
    if not host:
        return UNKNOWN_SITE
    return host[4:] if host.startswith("www.") else host


def validate_url(url: str) -> str:
    url = (url or "").strip()
    if not url:
        raise InvalidInputError("URL is required")
    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    host = urlparse(url).hostname
    if not host:
        raise InvalidInputError("Invalid URL format")
    if is_internal_host(host):
        raise InvalidInputError("URL must point to a public website")
    return url


def is_internal_host(host: str) -> bool:
    """True for localhost names and loopback, private, link-local or reserved IPs."""
    host = host.strip("[]").lower().rstrip(".")
    if host == "localhost" or host.endswith(".localhost"):
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    return (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_reserved
        or address.is_multicast
        or address.is_unspecified
    )


async def reject_internal_redirect(request: httpx.Request) -> None:
    """Request hook: redirects may not lead to an internal host either."""
    if is_internal_host(request.url.host):
        raise ScrapeFailedError("Failed to scrape URL", details="Redirected to a non-public host")


def clean_text(text: str) -> str:
    return " ".join(text.split())


def _meta(soup: BeautifulSoup, *selectors: tuple[str, str]) -> str | None:
    """Return the first non-empty <meta content> among (attribute, value) selectors."""
    for attr, value in selectors:
        tag = soup.find("meta", attrs={attr: value})
        if tag and tag.get("content") and tag["content"].strip():
            return clean_text(tag["content"])
    return None


def parse_citation_metadata(html: str, url: str) -> CitationMetadata:
    """Read citation fields from a page's HTML."""
    soup = BeautifulSoup(html, "html.parser")
    site_name = extract_domain_name(url)

    title = None
    if soup.title and soup.title.string and soup.title.string.strip():
        title = clean_text(soup.title.string)
    title = title or _meta(soup, ("property", "og:title"), ("name", "title"))
    if not title and soup.h1:
        title = clean_text(soup.h1.get_text()) or None

    author = _meta(
        soup,
        ("name", "author"),
        ("property", "article:author"),
        ("property", "book:author"),
        ("name", "twitter:creator"),
    )
    publisher = _meta(
        soup,
        ("property", "og:site_name"),
        ("name", "publisher"),
        ("name", "application-name"),
    )

    # Published time wins over modified time, which wins over generic date fields
    publication_date = _meta(soup, ("property", "article:published_time"))
    publication_date = publication_date or _meta(soup, ("property", "article:modified_time"))
    publication_date = publication_date or _meta(soup, ("name", "date"), ("name", "pubdate"))
    if not publication_date:
        time_tag = soup.find("time", attrs={"datetime": True})
        if time_tag:
            publication_date = time_tag["datetime"].strip() or None

    description = _meta(soup, ("name", "description"), ("property", "og:description"))

    return CitationMetadata(
        title=title or "Untitled",
        author=author or UNKNOWN_AUTHOR,
        publisher=publisher or site_name,
        publication_date=publication_date,
        url=url,
        site_name=site_name,
        description=description[:200] if description else None,
        last_modified=_meta(soup, ("name", "last-modified")),
    )


def fallback_metadata(url: str) -> CitationMetadata:
    """Minimal metadata derived from the URL alone."""
    site_name = extract_domain_name(url)
    return CitationMetadata(
        title=f"Article from {site_name}",
        publisher=site_name,
        publication_date=None,
        url=url,
        site_name=site_name,
        description=f"Content from {site_name}",
        last_modified=date.today().isoformat(),
    )


def get_http_client(transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=transport,
        timeout=settings.scrape_timeout_seconds,
        follow_redirects=True,
        event_hooks={"request": [reject_internal_redirect]},
        headers={
            "User-Agent": USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        },
    )


async def scrape_citation_metadata(url: str) -> CitationMetadata:
    """
    Fetch a URL and extract citation metadata from it.

    Raises:
        InvalidInputError: the URL is missing or malformed
        ScrapeFailedError: the page could not be fetched or is not HTML
    """
    url = validate_url(url)
    logger.info(f"Scraping citation metadata | url={url}")

    try:
        async with get_http_client() as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.warning(f"Citation scrape got HTTP {e.response.status_code} | url={url}")
        raise ScrapeFailedError("Failed to scrape URL", details=f"HTTP error {e.response.status_code}")
    except httpx.HTTPError as e:
        logger.warning(f"Citation scrape failed | url={url} | error={e}")
        raise ScrapeFailedError("Failed to scrape URL", details=str(e) or type(e).__name__)

    content_type = response.headers.get("content-type", "")
    if "html" not in content_type:
        raise ScrapeFailedError("Failed to scrape URL", details=f"Unsupported content type: {content_type}")
    if len(response.content) > MAX_CONTENT_SIZE:
        raise ScrapeFailedError("Failed to scrape URL", details="Content too large")

    metadata = parse_citation_metadata(response.text, url)
    logger.debug(f"Scraped metadata | title={metadata.title} | author={metadata.author}")
    return metadata
