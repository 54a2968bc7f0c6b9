import logging

from app.core.logging_config import RequestLogger, resolve_log_level


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy"}

    def test_root(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["docs"] == "/docs"


class TestSecurityHeaders:
    def test_api_headers(self, client):
        resp = client.get("/health")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"
        assert resp.headers["Content-Security-Policy"] == "default-src 'none'; frame-ancestors 'none'"
        assert "Strict-Transport-Security" not in resp.headers

    def test_docs_csp_allows_swagger_assets(self, client):
        resp = client.get("/docs")
        assert "cdn.jsdelivr.net" in resp.headers["Content-Security-Policy"]

    def test_error_responses_get_headers_too(self, client):
        resp = client.post("/api/upload")
        assert resp.status_code == 400
        assert resp.headers["X-Frame-Options"] == "DENY"


class TestCors:
    def test_localhost_origin_allowed(self, client):
        resp = client.options(
            "/api/ai/ask",
            headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "POST"},
        )
        assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_unknown_origin_rejected(self, client):
        resp = client.options(
            "/api/ai/ask",
            headers={"Origin": "https://evil.example", "Access-Control-Request-Method": "POST"},
        )
        assert "access-control-allow-origin" not in resp.headers


class TestErrorShape:
    def test_validation_errors_stay_422(self, client):
        resp = client.post("/api/ai/ask", json={"question": "Q?", "history": [{"role": "teacher", "content": "x"}]})
        assert resp.status_code == 422

    def test_unknown_route(self, client):
        assert client.get("/api/does-not-exist").status_code == 404


class TestLogging:
    def test_level_resolution(self):
        assert resolve_log_level("warning", "development") == logging.WARNING
        assert resolve_log_level("", "development") == logging.DEBUG
        assert resolve_log_level("", "production") == logging.WARNING

    def test_request_log_levels(self, caplog):
        request_logger = RequestLogger(logging.getLogger("courseconnect.requests.test"))

        with caplog.at_level(logging.DEBUG, logger="courseconnect.requests.test"):
            request_logger.log_request("GET", "/health", 200, 1.5, "127.0.0.1")
            request_logger.log_request("POST", "/api/ai/ask", 503, 12.0, "127.0.0.1")

        assert [record.levelno for record in caplog.records] == [logging.INFO, logging.ERROR]
        assert caplog.records[1].getMessage().startswith("POST /api/ai/ask -> 503")
