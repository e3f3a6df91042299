"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

This module handles individual client connections, wrapping the raw socket
with a higher-level API suitable for HTTP request/response handling.

=============================================================================
ONE CONNECTION, ONE REQUEST
=============================================================================

This server speaks a deliberately small subset of HTTP/1.1. There is no
keep-alive: every connection carries exactly one request and at most one
response, then it is closed.

    ┌─────────────────────────────────────────────────────────────────┐
    │                    Connection Lifetime                           │
    ├─────────────────────────────────────────────────────────────────┤
    │                                                                  │
    │   TCP Connect                                                    │
    │       │                                                          │
    │       ├── Read request line         (stream.read_line)          │
    │       ├── Read headers              (stream.read_line x N)      │
    │       ├── Read body                 (stream.read_exact)         │
    │       ├── Send response             (send_response)             │
    │       │                                                          │
    │   TCP Close                                                      │
    │                                                                  │
    └─────────────────────────────────────────────────────────────────┘

Any step may end the connection early: a malformed request gets a 400 and
a close, a client that disappears mid-request gets no response at all.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► WRITING
     │             │                │
     │             │                │
     │             ▼                ▼
     └──────────► CLOSING ◄─────────┘
                    │
                    ▼
                  CLOSED

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid

from .stream import ByteStream


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """
    Connection lifecycle states.

    Used for logging and to make close() idempotent.
    """
    NEW = "new"                # Just accepted, haven't read anything yet
    READING = "reading"        # Reading request line / headers / body
    WRITING = "writing"        # Sending response data
    CLOSING = "closing"        # About to close
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Responsibilities                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. BUFFERED READING                                                 │
    │     └── Exposes a ByteStream over the socket (see stream.py)        │
    │                                                                      │
    │  2. TIMEOUT MANAGEMENT                                               │
    │     └── None by default: reads block until data or close            │
    │     └── A slow client only ever blocks its own thread               │
    │                                                                      │
    │  3. STATE TRACKING                                                   │
    │     └── Know what phase of request handling we're in                 │
    │                                                                      │
    │  4. GRACEFUL CLOSE                                                   │
    │     └── Proper TCP shutdown sequence                                 │
    │     └── Drain unread request data so the peer sees FIN, not RST     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Unique connection identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when connection was accepted.
        stream: Buffered reader used by the request parser.
    """

    # Required parameters
    socket: socket.socket
    address: tuple[str, int]

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    # Configuration (passed from ServerConfig)
    buffer_size: int = 8192
    timeout: Optional[float] = None
    max_line_length: Optional[int] = None

    stream: ByteStream = field(init=False, repr=False)

    def __post_init__(self):
        """
        Configure socket after initialization.

        Called automatically by dataclass after __init__.
        """
        # settimeout(None) puts the socket in plain blocking mode
        self.socket.settimeout(self.timeout)

        self.stream = ByteStream(
            self.socket.recv,
            buffer_size=self.buffer_size,
            max_line_length=self.max_line_length,
        )

    # =========================================================================
    # PROPERTIES: Convenient accessors
    # =========================================================================

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # WRITING: Send response data to the client
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response data to the client.

        Uses sendall() to ensure ALL data is sent. Regular send() might
        only send part of the data if the buffer is full.

        Args:
            data: Response bytes to send.

        Returns:
            True if send succeeded, False if connection lost.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            # Client disconnected; we're about to close anyway
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING: Properly terminate the connection
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        Performs proper TCP shutdown sequence:

        1. shutdown(SHUT_WR): Tell client we're done sending
           └── Sends FIN packet to client

        2. Drain remaining data: Read any data client sent
           └── GET / is answered before the headers are read. Closing
               with those bytes still unread makes the kernel send RST,
               which can destroy the response before the client reads it.

        3. close(): Release socket file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # socket.timeout included; we're closing anyway

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    # =========================================================================
    # CONTEXT MANAGER: For use with 'with' statement
    # =========================================================================

    def __enter__(self):
        """
        Context manager entry.

            with conn:
                response = server.handle(conn.stream)
                conn.send_response(response.to_bytes())
            # Connection automatically closed here
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False  # Don't suppress exceptions
