"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration management for the HTTP server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m tinyhttpd /tmp/files --port 4221                │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── TINYHTTPD_PORT=4221 python -m tinyhttpd                   │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


HEADER_POLICIES = ("skip", "strict")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    PARSING LIMITS
    - header_policy, max_line_length, max_body_size

    FILES
    - directory

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """The IP address to bind to."""

    port: int = 42069
    """The port number to listen on. 0 lets the OS pick a free port."""

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    buffer_size: int = 8192
    """Bytes requested per recv() call."""

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds.
    None = reads block until data arrives or the peer closes. A client
    that sends a request line and never finishes its headers holds its
    worker thread indefinitely; set a value to bound that.
    """

    # ─────────────────────────────────────────────────────────────────────
    # PARSING LIMITS
    # ─────────────────────────────────────────────────────────────────────

    header_policy: str = "skip"
    """
    What to do with a header line that has no colon.
    "skip"   - ignore the line and keep parsing
    "strict" - reject the request with 400 Bad Request
    """

    max_line_length: Optional[int] = None
    """Longest request line or header line accepted (None = unlimited).
    Opt-in: without it a client can grow a line until memory runs out."""

    max_body_size: Optional[int] = None
    """Largest Content-Length accepted (None = unlimited).
    Opt-in: without it the whole declared body is buffered in memory."""

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: str = "."
    """Root directory for the /files/ route."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        TINYHTTPD_HOST           Server host (default: 0.0.0.0)
        TINYHTTPD_PORT           Server port (default: 42069)
        TINYHTTPD_DIRECTORY      Files root (default: .)
        TINYHTTPD_TIMEOUT        Socket timeout in seconds (default: none)
        TINYHTTPD_HEADER_POLICY  skip | strict (default: skip)
        TINYHTTPD_LOG_LEVEL      Logging level (default: INFO)

        =====================================================================
        """
        timeout = os.getenv("TINYHTTPD_TIMEOUT")
        return cls(
            host=os.getenv("TINYHTTPD_HOST", "0.0.0.0"),
            port=int(os.getenv("TINYHTTPD_PORT", "42069")),
            directory=os.getenv("TINYHTTPD_DIRECTORY", "."),
            timeout=float(timeout) if timeout else None,
            header_policy=os.getenv("TINYHTTPD_HEADER_POLICY", "skip"),
            log_level=os.getenv("TINYHTTPD_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called from HTTPServer.__init__ so a bad value fails at startup,
        not on the first request.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.header_policy not in HEADER_POLICIES:
            raise ValueError(
                f"header_policy must be one of {', '.join(HEADER_POLICIES)}, "
                f"got {self.header_policy!r}"
            )

        if self.max_line_length is not None and self.max_line_length < 1:
            raise ValueError("max_line_length must be >= 1")

        if self.max_body_size is not None and self.max_body_size < 0:
            raise ValueError("max_body_size must be >= 0")

        if os.path.isfile(self.directory):
            raise ValueError(f"directory is a file, not a directory: {self.directory}")
