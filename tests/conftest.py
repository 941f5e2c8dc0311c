"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttpd import HTTPServer, ServerConfig


INDEX_HTML = b"<!DOCTYPE html><html><body>root index</body></html>\n"
DOCS_INDEX_HTML = b"<html><body>docs index</body></html>\n"
STYLE_CSS = b"body { color: #333; }\n"
LOGO_PNG = b"\x89PNG\r\n\x1a\n" + bytes(range(256))


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request with a query string."""
    return (
        b"GET /about?x=1&y=two%20words HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b'{"name": "John"}'
    return (
        b"POST / HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/json\r\n"
        b"Content-Length: %d\r\n"
        b"\r\n"
    ) % len(body) + body


@pytest.fixture
def document_root(tmp_path: Path) -> Path:
    """
    A small document root:

        index.html
        style.css
        logo.png
        README
        docs/index.html
        empty/
    """
    (tmp_path / "index.html").write_bytes(INDEX_HTML)
    (tmp_path / "style.css").write_bytes(STYLE_CSS)
    (tmp_path / "logo.png").write_bytes(LOGO_PNG)
    (tmp_path / "README").write_bytes(b"no extension\n")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "index.html").write_bytes(DOCS_INDEX_HTML)
    (tmp_path / "empty").mkdir()
    return tmp_path


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@pytest.fixture
def config(document_root: Path, free_port: int) -> ServerConfig:
    """Test server configuration bound to localhost."""
    return ServerConfig(
        host="127.0.0.1",
        port=free_port,
        document_root=str(document_root),
        accept_poll_interval=0.1,
        log_level="WARNING",
    )


@pytest.fixture
def app(config: ServerConfig) -> HTTPServer:
    """A server that is configured but not listening."""
    return HTTPServer(config)


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class, despite the name

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread and wait until it listens."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes) -> bytes:
        """Send raw bytes and read the whole response until EOF."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(raw)
            chunks = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    def get(self, target: str) -> bytes:
        return self.request(f"GET {target} HTTP/1.1\r\nHost: localhost\r\n\r\n".encode())


@pytest.fixture
def test_server(app: HTTPServer) -> Generator[TestServer, None, None]:
    """A running server on a free localhost port."""
    test_srv = TestServer(app)
    test_srv.start()

    yield test_srv

    test_srv.stop()


def _split_response(raw: bytes):
    """Split a raw response into (status_code, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    status_code = int(lines[0].split(" ")[1])
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
    return status_code, headers, body


@pytest.fixture
def split_response():
    """Helper that splits raw response bytes into (status, headers, body)."""
    return _split_response
