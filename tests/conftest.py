"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator, Optional, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from microserve import HTTPServer, ServerConfig
from microserve.http import Request, redirect
from microserve.session import Session


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request carrying a session cookie."""
    return (
        b"GET /counter HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Cookie: session_id=3\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a form body."""
    body = b"user=alice&age=30"
    return (
        b"POST /login HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/x-www-form-urlencoded\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
        + body
    )


@pytest.fixture
def config() -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


def send_raw(address: Tuple[str, int], data: bytes, half_close: bool = False) -> bytes:
    """
    Send raw bytes and read until the server closes the connection.

    half_close shuts down our write side after sending, for requests that
    announce more body than they carry.
    """
    with socket.create_connection(address, timeout=5.0) as s:
        s.sendall(data)
        if half_close:
            s.shutdown(socket.SHUT_WR)

        chunks = []
        while True:
            chunk = s.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class

    def __init__(self, server: HTTPServer):
        self.server = server
        self.address: Optional[Tuple[str, int]] = None
        self._thread: Optional[threading.Thread] = None

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")
        self.address = self.server.address

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        self.server.wait_for_shutdown(timeout=5.0)

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, data: bytes, half_close: bool = False) -> bytes:
        return send_raw(self.address, data, half_close=half_close)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """Create a running test server with a few session-aware routes."""
    server = HTTPServer(config)

    @server.get("/counter")
    def counter(request: Request, session: Session) -> str:
        count = (session.get("count", int) or 0) + 1
        session.set("count", count)
        return f"count={count}"

    @server.post("/echo")
    def echo(request: Request, session: Session) -> str:
        return request.body or ""

    @server.get("/unicode")
    def unicode_body(request: Request, session: Session) -> str:
        return "héllo wörld ✓"

    @server.get("/go")
    def go(request: Request, session: Session):
        return redirect("/counter")

    @server.get("/boom")
    def boom(request: Request, session: Session) -> str:
        raise RuntimeError("handler exploded")

    test_srv = TestServer(server)
    test_srv.start()

    yield test_srv

    test_srv.stop()
