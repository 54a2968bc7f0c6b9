#!/usr/bin/env python3
"""
Smoke test for the CourseConnect Study API.

Exercises every public endpoint against a running server.
Usage:
    python scripts/smoke-test.py
    python scripts/smoke-test.py --base-url https://study.example.edu
    python scripts/smoke-test.py --skip-ai

Environment variables (alternative to CLI args):
    SMOKE_BASE_URL, SMOKE_SKIP_AI
"""

import argparse
import json
import os
import sys
import time
import uuid
from urllib.request import Request, urlopen
from urllib.error import HTTPError, URLError

# --- Formatting helpers ---

GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
CYAN = "\033[96m"
RESET = "\033[0m"
BOLD = "\033[1m"

passed = 0
failed = 0
skipped = 0
results = []

SAMPLE_SYLLABUS = """BIO 110 Introduction to Biology, Spring 2025
Instructor: Dr. Maya Patel
Lab report 1 due 2025-02-10 (15%)
Midterm exam 2025-03-12 (25%)
Final exam 2025-05-05 (35%)
Required text: Campbell Biology, Urry et al.
"""


def ok(name, detail=""):
    global passed
    passed += 1
    msg = f"  {GREEN}PASS{RESET}  {name}"
    if detail:
        msg += f"  ({detail})"
    print(msg)
    results.append(("PASS", name))


def fail(name, detail=""):
    global failed
    failed += 1
    msg = f"  {RED}FAIL{RESET}  {name}"
    if detail:
        msg += f": {detail}"
    print(msg)
    results.append(("FAIL", name))


def skip(name, reason=""):
    global skipped
    skipped += 1
    msg = f"  {YELLOW}SKIP{RESET}  {name}"
    if reason:
        msg += f": {reason}"
    print(msg)
    results.append(("SKIP", name))


# --- HTTP helpers ---

def send(req, timeout):
    """Send a request, returns (status_code, json_body | None)."""
    try:
        with urlopen(req, timeout=timeout) as resp:
            raw = resp.read().decode()
            try:
                body = json.loads(raw)
            except ValueError:
                body = None
            return resp.status, body
    except HTTPError as e:
        try:
            body = json.loads(e.read().decode())
        except ValueError:
            body = None
        return e.code, body
    except (URLError, TimeoutError) as e:
        return 0, {"error": str(e)}


def api_get(base, path, timeout=30):
    return send(Request(f"{base}{path}", method="GET"), timeout)


def api_post_json(base, path, data, timeout=60):
    req = Request(f"{base}{path}", data=json.dumps(data).encode(), method="POST")
    req.add_header("Content-Type", "application/json")
    return send(req, timeout)


def api_post_file(base, path, filename, content, timeout=60):
    """POST a single multipart file field named "file"."""
    boundary = uuid.uuid4().hex
    body = (
        f"--{boundary}\r\n"
        f'Content-Disposition: form-data; name="file"; filename="{filename}"\r\n'
        "Content-Type: application/octet-stream\r\n\r\n"
    ).encode() + content + f"\r\n--{boundary}--\r\n".encode()
    req = Request(f"{base}{path}", data=body, method="POST")
    req.add_header("Content-Type", f"multipart/form-data; boundary={boundary}")
    return send(req, timeout)


def error_of(body):
    return body.get("error", "") if isinstance(body, dict) else ""


# --- Test groups ---

def test_health(base):
    print(f"\n{BOLD}Health & Connectivity{RESET}")
    code, body = api_get(base, "/health")
    if code == 200 and body and body.get("status") == "healthy":
        ok("GET /health", f"status={body['status']}")
    else:
        fail("GET /health", f"code={code}")

    # Swagger UI returns HTML, not JSON
    try:
        with urlopen(Request(f"{base}/docs"), timeout=10) as resp:
            if resp.status == 200:
                ok("GET /docs (Swagger UI)")
            else:
                fail("GET /docs", f"code={resp.status}")
    except (HTTPError, URLError) as e:
        code = e.code if isinstance(e, HTTPError) else 0
        fail("GET /docs", f"code={code}")


def test_upload(base):
    print(f"\n{BOLD}Document Upload{RESET}")

    code, body = api_get(base, "/api/upload/formats")
    if code == 200 and body and ".pdf" in body.get("documents", []):
        ok("GET /api/upload/formats", f"max={body.get('maxFileSizeMb')}MB")
    else:
        fail("GET /api/upload/formats", f"code={code}")

    code, body = api_post_file(base, "/api/upload", "syllabus.txt", SAMPLE_SYLLABUS.encode())
    if code == 200 and body and "Dr. Maya Patel" in body.get("text", ""):
        ok("POST /api/upload (txt)", f"{body['metadata']['wordCount']} words")
    else:
        fail("POST /api/upload (txt)", f"code={code} {error_of(body)}")

    code, body = api_post_file(base, "/api/upload", "slides.pptx", b"PK\x03\x04")
    if code == 400 and body and body.get("success") is False:
        ok("POST /api/upload (pptx) -> 400")
    else:
        fail("POST /api/upload (pptx) -> expected 400", f"got {code}")

    code, body = api_post_json(base, "/api/upload", {})
    if code == 400:
        ok("POST /api/upload (no file) -> 400")
    else:
        fail("POST /api/upload (no file) -> expected 400", f"got {code}")


def test_input_validation(base):
    """Requests without input are rejected before any AI call is made."""
    print(f"\n{BOLD}Input Validation (no AI calls){RESET}")

    checks = [
        ("/api/ai/ask", {"question": ""}),
        ("/api/citations", {}),
        ("/api/flashcards/generate", {}),
        ("/api/syllabus/analyze", {"text": "  "}),
        ("/api/citations/scrape", {"url": ""}),
        ("/api/notes/generate", {}),
        ("/api/notes/summarize", {"messages": []}),
    ]
    for path, payload in checks:
        code, _ = api_post_json(base, path, payload)
        if code == 400:
            ok(f"POST {path} -> 400")
        else:
            fail(f"POST {path} -> expected 400", f"got {code}")


def test_ai_endpoints(base):
    print(f"\n{BOLD}AI Endpoints (live provider calls){RESET}")

    code, body = api_post_json(base, "/api/ai/ask", {
        "question": "Who teaches this course?",
        "context": SAMPLE_SYLLABUS,
    })
    if code == 200 and body and body.get("answer"):
        ok("POST /api/ai/ask", f"provider={body['provider']} backend={body['backend']}")
    elif code == 503:
        fail("POST /api/ai/ask", "all AI providers unavailable")
    else:
        fail("POST /api/ai/ask", f"code={code} {error_of(body)}")

    code, body = api_post_json(base, "/api/citations", {
        "text": "Photosynthesis converts light energy into chemical energy stored in glucose.",
    })
    if code == 200 and body and body.get("citation"):
        citation = body["citation"]
        detail = f"confidence={citation['confidence']}"
        if citation.get("warning"):
            detail += " (placeholder)"
        ok("POST /api/citations", detail)
    else:
        fail("POST /api/citations", f"code={code} {error_of(body)}")

    code, body = api_post_json(base, "/api/flashcards/generate", {"topic": "Cell respiration"})
    if code == 200 and body and body.get("flashcards"):
        ok("POST /api/flashcards/generate", f"{len(body['flashcards'])} cards")
    else:
        fail("POST /api/flashcards/generate", f"code={code} {error_of(body)}")

    code, body = api_post_json(base, "/api/syllabus/analyze", {"text": SAMPLE_SYLLABUS})
    if code == 200 and body and body.get("analysis", {}).get("isSyllabus"):
        ok("POST /api/syllabus/analyze", f"{len(body['analysis']['assignments'])} assignments")
    else:
        fail("POST /api/syllabus/analyze", f"code={code} {error_of(body)}")


# --- Main ---

def main():
    parser = argparse.ArgumentParser(description="CourseConnect Study API smoke test")
    parser.add_argument(
        "--base-url",
        default=os.environ.get("SMOKE_BASE_URL", "http://localhost:8000"),
        help="Base URL of the API",
    )
    parser.add_argument(
        "--skip-ai",
        action="store_true",
        default=bool(os.environ.get("SMOKE_SKIP_AI")),
        help="Skip endpoints that call an AI provider",
    )
    args = parser.parse_args()

    base = args.base_url.rstrip("/")
    print(f"{BOLD}{CYAN}=== CourseConnect Study API Smoke Test ==={RESET}")
    print(f"Target: {base}")
    print(f"Time:   {time.strftime('%Y-%m-%d %H:%M:%S UTC', time.gmtime())}")

    print("\nWarming up...", end=" ", flush=True)
    code, _ = api_get(base, "/health", timeout=60)
    if code == 200:
        print("ready.")
    else:
        print(f"warning: health returned {code}")

    test_health(base)
    test_upload(base)
    test_input_validation(base)

    if args.skip_ai:
        skip("AI endpoints", "--skip-ai given")
    else:
        test_ai_endpoints(base)

    # Summary
    print(f"\n{BOLD}{'=' * 45}{RESET}")
    total = passed + failed + skipped
    color = GREEN if failed == 0 else RED
    print(f"{color}{BOLD}{passed} passed{RESET}, {RED if failed else ''}{failed} failed{RESET}, {skipped} skipped, {total} total")

    if failed > 0:
        print(f"\n{RED}Failed tests:{RESET}")
        for status, name in results:
            if status == "FAIL":
                print(f"  - {name}")

    print()
    sys.exit(1 if failed > 0 else 0)


if __name__ == "__main__":
    main()
