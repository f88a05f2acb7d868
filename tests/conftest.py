import json
import threading
from datetime import datetime
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class MockResponse:
    """requests.Response の代わりに使う簡易レスポンス."""

    def __init__(self, *, status_code=200, text=""):
        self.status_code = status_code
        self.text = text

    def json(self):
        return json.loads(self.text)


@pytest.fixture
def load_fixture():
    def _load(name: str) -> str:
        return (FIXTURES_DIR / name).read_text(encoding="utf-8")

    return _load


@pytest.fixture
def make_response():
    def _make(text="", status_code=200):
        if not isinstance(text, str):
            text = json.dumps(text, ensure_ascii=False)
        return MockResponse(status_code=status_code, text=text)

    return _make


@pytest.fixture
def fixed_now():
    return datetime(2026, 10, 1, 12, 0, 0)


class _SlowHandler(BaseHTTPRequestHandler):
    """release されるまで応答を保留するハンドラ."""

    def _respond(self):
        self.server.release.wait(10)
        body = b"{}"
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    do_GET = _respond
    do_POST = _respond

    def log_message(self, format, *args):
        pass


@pytest.fixture
def slow_server():
    """応答しないローカル HTTP サーバーの URL."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _SlowHandler)
    server.release = threading.Event()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_port}/"
    server.release.set()
    server.shutdown()
    server.server_close()
