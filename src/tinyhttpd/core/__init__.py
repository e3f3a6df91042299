"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The low-level networking plumbing underneath the HTTP layer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Creates the listening socket, binds, listens                     │
    │  • Runs the accept() loop                                           │
    │  • Handles graceful shutdown via signals (SIGTERM, SIGINT)          │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ One thread per accepted connection
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • Wraps a client socket                                            │
    │  • Tracks state (NEW → READING → WRITING → CLOSING → CLOSED)       │
    │  • Sends the response, closes gracefully                            │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ conn.stream
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          BYTE STREAM                                 │
    │  • Buffers recv() chunks                                            │
    │  • read_line() / read_exact(n) for the request parser               │
    └─────────────────────────────────────────────────────────────────────┘

Connections never share state, so there is no thread pool, queue, or lock
here: each worker thread owns its socket, its buffer, and its request.
"""

from .stream import ByteStream, StreamClosed, LineTooLongError
from .connection import Connection, ConnectionState
from .socket_server import SocketServer

__all__ = [
    "SocketServer",     # Listening socket + accept loop
    "Connection",       # Client socket wrapper
    "ConnectionState",  # Connection lifecycle states
    "ByteStream",       # Buffered line / fixed-length reader
    "StreamClosed",     # Peer went away mid-read
    "LineTooLongError",
]
