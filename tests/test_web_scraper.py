import asyncio

import httpx
import pytest

from app.core.exceptions import InvalidInputError, ScrapeFailedError
from app.services import web_scraper
from app.services.web_scraper import (
    extract_domain_name,
    fallback_metadata,
    parse_citation_metadata,
    scrape_citation_metadata,
    validate_url,
)


ARTICLE_HTML = """
<html>
<head>
  <title>  The Water
     Cycle </title>
  <meta name="author" content="Nguyen, Linh">
  <meta property="og:site_name" content="Earth Science Weekly">
  <meta property="article:modified_time" content="2020-02-02">
  <meta property="article:published_time" content="2020-01-15">
  <meta name="description" content="Evaporation, condensation and precipitation explained.">
</head>
<body><h1>Ignored heading</h1></body>
</html>
"""


class TestUrls:
    def test_scheme_is_added(self):
        assert validate_url("example.com/page") == "https://example.com/page"

    def test_existing_scheme_is_kept(self):
        assert validate_url(" http://example.com ") == "http://example.com"

    @pytest.mark.parametrize("url", ["", "   ", None])
    def test_missing(self, url):
        with pytest.raises(InvalidInputError, match="URL is required"):
            validate_url(url)

    def test_no_host(self):
        with pytest.raises(InvalidInputError, match="Invalid URL format"):
            validate_url("https://")

    @pytest.mark.parametrize("url", [
        "http://localhost:8000/admin",
        "http://127.0.0.1/",
        "http://169.254.169.254/latest/meta-data",
        "10.0.0.5/internal",
        "http://192.168.1.1",
        "http://[::1]/",
        "http://0.0.0.0/",
        "https://api.localhost/",
    ])
    def test_internal_hosts_are_rejected(self, url):
        with pytest.raises(InvalidInputError, match="public website"):
            validate_url(url)

    def test_public_ip_is_allowed(self):
        assert validate_url("http://8.8.8.8/") == "http://8.8.8.8/"

    def test_domain_name_drops_www(self):
        assert extract_domain_name("https://www.nasa.gov/earth") == "nasa.gov"


class TestParseMetadata:
    def test_article(self):
        metadata = parse_citation_metadata(ARTICLE_HTML, "https://www.earthweekly.example/water")

        assert metadata.title == "The Water Cycle"
        assert metadata.author == "Nguyen, Linh"
        assert metadata.publisher == "Earth Science Weekly"
        assert metadata.publication_date == "2020-01-15"
        assert metadata.site_name == "earthweekly.example"
        assert metadata.description.startswith("Evaporation")

    def test_bare_page_defaults(self):
        metadata = parse_citation_metadata("<html><body><p>hi</p></body></html>", "https://example.org/x")

        assert metadata.title == "Untitled"
        assert metadata.author == "Unknown Author"
        assert metadata.publisher == "example.org"
        assert metadata.publication_date is None

    def test_heading_and_time_tag(self):
        html = '<html><body><h1>Lecture 4</h1><time datetime="2019-10-01">Oct 1</time></body></html>'
        metadata = parse_citation_metadata(html, "https://example.org/x")

        assert metadata.title == "Lecture 4"
        assert metadata.publication_date == "2019-10-01"

    def test_fallback_metadata(self):
        metadata = fallback_metadata("https://www.example.edu/notes")
        assert metadata.title == "Article from example.edu"
        assert metadata.url == "https://www.example.edu/notes"


class TestScrape:
    def install(self, monkeypatch, handler):
        monkeypatch.setattr(
            web_scraper,
            "get_http_client",
            lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

    def test_success(self, monkeypatch):
        self.install(monkeypatch, lambda request: httpx.Response(
            200, text=ARTICLE_HTML, headers={"content-type": "text/html; charset=utf-8"},
        ))

        metadata = asyncio.run(scrape_citation_metadata("earthweekly.example/water"))
        assert metadata.url == "https://earthweekly.example/water"
        assert metadata.author == "Nguyen, Linh"

    def test_non_html(self, monkeypatch):
        self.install(monkeypatch, lambda request: httpx.Response(
            200, content=b"%PDF-1.4", headers={"content-type": "application/pdf"},
        ))

        with pytest.raises(ScrapeFailedError) as exc_info:
            asyncio.run(scrape_citation_metadata("https://example.org/paper.pdf"))
        assert "application/pdf" in exc_info.value.details

    def test_redirect_to_internal_host_is_refused(self, monkeypatch):
        def handler(request):
            if request.url.host == "example.org":
                return httpx.Response(302, headers={"location": "http://169.254.169.254/latest"})
            return httpx.Response(200, text="<title>secret</title>", headers={"content-type": "text/html"})

        build_client = web_scraper.get_http_client
        monkeypatch.setattr(
            web_scraper,
            "get_http_client",
            lambda: build_client(transport=httpx.MockTransport(handler)),
        )

        with pytest.raises(ScrapeFailedError) as exc_info:
            asyncio.run(scrape_citation_metadata("https://example.org/page"))
        assert exc_info.value.details == "Redirected to a non-public host"

    def test_network_error(self, monkeypatch):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        self.install(monkeypatch, refuse)

        with pytest.raises(ScrapeFailedError) as exc_info:
            asyncio.run(scrape_citation_metadata("https://example.org"))
        assert exc_info.value.status_code == 502
