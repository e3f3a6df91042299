"""
=============================================================================
BUFFERED BYTE STREAM
=============================================================================

TCP hands us bytes in whatever chunks the network felt like delivering.
HTTP, on the other hand, is defined in terms of LINES (request line and
headers) followed by a BODY of a known length. This module bridges the two.

=============================================================================
TWO READ PRIMITIVES
=============================================================================

Everything the request parser needs boils down to two operations:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       ByteStream Operations                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   read_line()       "GET /echo/abc HTTP/1.1\\r\\n"                    │
    │   ───────────       Everything up to and INCLUDING the next \\n      │
    │                     Used for: request line, each header line        │
    │                                                                      │
    │   read_exact(n)     b"hello"                                        │
    │   ─────────────     Exactly n bytes, no more, no less               │
    │                     Used for: the body (n = Content-Length)         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Both share ONE buffer. Bytes received while looking for the end of the
header block may already contain part of the body - they must not be lost:

    recv() #1 → b"POST /files/a HTTP/1.1\\r\\nContent-Length: 5\\r\\n\\r\\nhel"
    recv() #2 → b"lo"

    read_line() x3 consumes the request line, header and blank line.
    read_exact(5) finds b"hel" already buffered, receives b"lo", done.

=============================================================================
END OF STREAM
=============================================================================

recv() returning b"" means the peer closed its side. If we are in the
middle of a line or a body at that moment, the request can never be
completed, so we raise StreamClosed. Partial data is NOT returned - a short
body must be an error, never a silently truncated upload.

=============================================================================
"""

import socket
import logging
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class StreamClosed(ConnectionError):
    """
    Raised when the peer closes (or the socket fails) before a read completes.

    Attributes:
        received: How many bytes of the pending read were available when
                  the stream ended. Useful for reporting truncated bodies.
    """

    def __init__(self, message: str = "Stream closed by peer", received: int = 0):
        super().__init__(message)
        self.received = received


class LineTooLongError(Exception):
    """Raised when a line exceeds the configured maximum length."""

    def __init__(self, limit: int):
        super().__init__(f"Line exceeds {limit} bytes")
        self.limit = limit


class ByteStream:
    """
    Buffered reader over a ``recv``-style callable.

    The stream does not know about sockets directly, it only needs a
    function with the signature of ``socket.recv``. This keeps it usable
    from tests with canned chunks:

        chunks = iter([b"GET / HT", b"TP/1.1\\r\\n", b""])
        stream = ByteStream(lambda n: next(chunks))
        stream.read_line()   # b"GET / HTTP/1.1\\r\\n"

    Args:
        recv: Callable returning up to ``n`` bytes, or b"" at end of stream.
        buffer_size: Bytes requested per recv() call.
        max_line_length: Longest line read_line() accepts (None = unlimited).
    """

    def __init__(
        self,
        recv: Callable[[int], bytes],
        buffer_size: int = 8192,
        max_line_length: Optional[int] = None,
    ):
        self._recv = recv
        self.buffer_size = buffer_size
        self.max_line_length = max_line_length
        self._buffer = bytearray()
        self._eof = False

    @property
    def buffered(self) -> int:
        """Number of bytes received but not yet consumed."""
        return len(self._buffer)

    def _fill(self) -> bool:
        """
        Receive one more chunk into the buffer.

        Returns:
            False once the peer has closed the stream.
        """
        if self._eof:
            return False

        try:
            chunk = self._recv(self.buffer_size)
        except socket.timeout:
            # Must come before OSError: socket.timeout is a subclass of it
            raise StreamClosed("Read timed out", received=len(self._buffer))
        except (ConnectionResetError, BrokenPipeError):
            chunk = b""
        except OSError as e:
            raise StreamClosed(f"Read failed: {e}", received=len(self._buffer))

        if not chunk:
            self._eof = True
            return False

        self._buffer += chunk
        return True

    def read_line(self) -> bytes:
        """
        Read one line, terminator included.

        Both ``\\r\\n`` and a bare ``\\n`` end a line; the caller strips
        whatever whitespace it does not care about.

        Raises:
            StreamClosed: The stream ended before a newline arrived.
            LineTooLongError: No newline within ``max_line_length`` bytes.
        """
        scanned = 0
        while True:
            newline = self._buffer.find(b"\n", scanned)
            if newline != -1:
                line = bytes(self._buffer[:newline + 1])
                del self._buffer[:newline + 1]
                self._check_length(len(line))
                return line

            # Nothing before this point contains a newline, don't rescan it
            scanned = len(self._buffer)
            self._check_length(scanned)

            if not self._fill():
                raise StreamClosed(
                    "Stream closed before end of line", received=len(self._buffer)
                )

    def read_exact(self, size: int) -> bytes:
        """
        Read exactly ``size`` bytes.

        Raises:
            StreamClosed: Fewer than ``size`` bytes arrived before the stream
                          ended. ``received`` holds how many did.
        """
        while len(self._buffer) < size:
            if not self._fill():
                raise StreamClosed(
                    f"Expected {size} bytes, stream closed after {len(self._buffer)}",
                    received=len(self._buffer),
                )

        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    def _check_length(self, length: int):
        if self.max_line_length is not None and length > self.max_line_length:
            raise LineTooLongError(self.max_line_length)
