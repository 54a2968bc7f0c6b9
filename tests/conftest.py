import io
import os

# Must be set before the app (and its Settings) are imported
os.environ["LOG_TO_FILE"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["AI_PROVIDER_PREFERENCE"] = "anthropic"

import pytest
from fastapi.testclient import TestClient

from app.services.ai_providers import AIProviderError


class FakeProvider:
    """Stands in for an AI backend; records every prompt it receives."""

    def __init__(self, name, reply=None, error=None):
        self.name = name
        self.reply = reply
        self.error = error
        self.calls = []

    def generate(self, prompt, system_prompt, max_tokens, temperature):
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt, "max_tokens": max_tokens})
        if self.error:
            raise AIProviderError(self.error)
        if callable(self.reply):
            return self.reply(prompt)
        return self.reply


@pytest.fixture(scope="session")
def app():
    import main as main_module
    return main_module.app


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def install_providers(monkeypatch):
    """Replace the provider list with fakes: install_providers(primary, fallback)."""
    def install(*providers):
        monkeypatch.setattr("app.services.ai_service.get_providers", lambda: list(providers))
        return providers
    return install


@pytest.fixture()
def fake_provider():
    return FakeProvider


@pytest.fixture()
def make_pdf():
    """Build a one-page PDF whose content stream draws the given text."""
    def build(text):
        content = f"BT /F1 18 Tf 72 720 Td ({text}) Tj ET"
        objects = [
            "<< /Type /Catalog /Pages 2 0 R >>",
            "<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
            "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            "/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
            f"<< /Length {len(content)} >>\nstream\n{content}\nendstream",
            "<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        ]
        out = "%PDF-1.4\n"
        offsets = []
        for number, body in enumerate(objects, 1):
            offsets.append(len(out))
            out += f"{number} 0 obj\n{body}\nendobj\n"
        xref_offset = len(out)
        out += f"xref\n0 {len(objects) + 1}\n0000000000 65535 f \n"
        out += "".join(f"{offset:010d} 00000 n \n" for offset in offsets)
        out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_offset}\n%%EOF\n"
        return out.encode("latin-1")
    return build


@pytest.fixture()
def make_docx():
    """Build a .docx with the given paragraphs and optional table rows."""
    def build(paragraphs, table_rows=None):
        from docx import Document

        doc = Document()
        for paragraph in paragraphs:
            doc.add_paragraph(paragraph)
        if table_rows:
            table = doc.add_table(rows=len(table_rows), cols=len(table_rows[0]))
            for r, row in enumerate(table_rows):
                for c, value in enumerate(row):
                    table.cell(r, c).text = value
        buffer = io.BytesIO()
        doc.save(buffer)
        return buffer.getvalue()
    return build
