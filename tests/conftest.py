"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Callable, Generator, Iterable, List
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tinyhttpd import HTTPServer, ServerConfig
from tinyhttpd.core import ByteStream


def chunked_recv(chunks: Iterable[bytes]) -> Callable[[int], bytes]:
    """
    recv()-style callable that hands out the given chunks, then b"".

    A chunk larger than the requested size is split across calls, like a
    real socket would.
    """
    pending: List[bytes] = list(chunks)

    def recv(size: int) -> bytes:
        while pending:
            chunk = pending.pop(0)
            if not chunk:
                continue
            if len(chunk) > size:
                pending.insert(0, chunk[size:])
                chunk = chunk[:size]
            return chunk
        return b""

    return recv


def make_stream(*chunks: bytes, **kwargs) -> ByteStream:
    """ByteStream over canned chunks."""
    return ByteStream(chunked_recv(chunks), **kwargs)


def byte_by_byte(data: bytes) -> ByteStream:
    """ByteStream that receives one byte per recv() call."""
    return make_stream(*(data[i:i + 1] for i in range(len(data))))


@pytest.fixture
def stream_factory() -> Callable[..., ByteStream]:
    """Build a ByteStream from canned chunks."""
    return make_stream


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/abc HTTP/1.1\r\n"
        b"Host: localhost:42069\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b"hello, file"
    return (
        b"POST /files/notes.txt HTTP/1.1\r\n"
        b"Host: localhost:42069\r\n"
        b"Content-Type: application/octet-stream\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
        + body
    )


@pytest.fixture
def files_dir(tmp_path: Path) -> Path:
    """Empty directory served under /files/."""
    root = tmp_path / "files"
    root.mkdir()
    return root


@pytest.fixture
def config(files_dir: Path) -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        directory=str(files_dir),
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def app(config: ServerConfig) -> HTTPServer:
    """HTTPServer that is never started; drive it with handle()."""
    return HTTPServer(config)


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class, despite the name

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def address(self):
        return self.server.address

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def exchange(self, data: bytes, shutdown_write: bool = True) -> bytes:
        """Send raw bytes on a fresh connection and read until close."""
        with socket.create_connection(self.address, timeout=5.0) as sock:
            sock.sendall(data)
            if shutdown_write:
                sock.shutdown(socket.SHUT_WR)

            received = b""
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    return received
                received += chunk


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running server on a free port."""
    test_srv = TestServer(HTTPServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()
