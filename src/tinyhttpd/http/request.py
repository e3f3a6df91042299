"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns a live byte stream into a structured HTTPRequest, one piece at a time.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  REQUEST LINE      POST /files/note.txt HTTP/1.1\\r\\n               │
    │                    ─┬── ───────┬─────── ────┬───                    │
    │                   Method      Path       Version (not validated)    │
    │                                                                      │
    │  HEADERS           Host: localhost:42069\\r\\n                        │
    │                    Content-Length: 5\\r\\n                            │
    │                                                                      │
    │  EMPTY LINE        \\r\\n                                              │
    │                                                                      │
    │  BODY              hello            (exactly Content-Length bytes)  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHY PARSE INCREMENTALLY?
=============================================================================

The parser never sees "the whole request" as one blob. It pulls from a
ByteStream in three separate steps:

    parse_request_line(stream)   one line
    parse_headers(stream)        lines until a blank one
    read_body(stream, headers)   Content-Length bytes

Splitting it up lets the server answer some routes (GET /) right after
the request line, before the client has even finished sending headers,
and it lets each step fail with its own error.

=============================================================================
ERRORS
=============================================================================

    ┌──────────────────────────┬──────────────────────────────┬────────┐
    │ Exception                │ Cause                        │ Status │
    ├──────────────────────────┼──────────────────────────────┼────────┤
    │ MalformedRequestLine     │ fewer than 2 fields          │  400   │
    │ MalformedHeader          │ no colon (strict policy)     │  400   │
    │ InvalidContentLength     │ not a non-negative integer   │  400   │
    │ TruncatedBody            │ stream closed mid-body       │  400   │
    │ LineTooLong              │ line over max_line_length    │  400   │
    │ StreamClosed (core)      │ stream closed mid-line       │   -    │
    └──────────────────────────┴──────────────────────────────┴────────┘

StreamClosed is not an HTTPParseError: whether it deserves a response
depends on WHERE it happened, so the server decides.

=============================================================================
LINE ENDINGS AND ENCODING
=============================================================================

Lines end at \\n; a preceding \\r is stripped together with the rest of the
surrounding whitespace. Text is decoded as ISO-8859-1, which maps every
byte to exactly one character, so header values and paths can be encoded
back to the exact bytes the client sent.

=============================================================================
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Dict, Tuple
import logging
import re

from ..core.stream import ByteStream, StreamClosed, LineTooLongError


logger = logging.getLogger(__name__)

# Byte-transparent text encoding for the request line and headers
WIRE_ENCODING = "iso-8859-1"

_CONTENT_LENGTH_PATTERN = re.compile(r"[0-9]+")


# =============================================================================
# EXCEPTIONS
# =============================================================================

class HTTPParseError(Exception):
    """
    Raised when HTTP request parsing fails.

    Carries the HTTP status code the client should receive. Every parse
    failure this server knows about is a 400.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class MalformedRequestLine(HTTPParseError):
    """The request line has fewer than two whitespace-separated fields."""


class MalformedHeader(HTTPParseError):
    """A header line has no colon (strict header policy only)."""


class InvalidContentLength(HTTPParseError):
    """Content-Length is not a non-negative integer, or is over the limit."""


class TruncatedBody(HTTPParseError):
    """The stream ended before Content-Length body bytes arrived."""

    def __init__(self, expected: int, received: int):
        super().__init__(f"Expected {expected} body bytes, received {received}")
        self.expected = expected
        self.received = received


class LineTooLong(HTTPParseError):
    """A request or header line exceeded the configured limit."""


# =============================================================================
# DATA
# =============================================================================

@dataclass(frozen=True)
class RequestLine:
    """The first line of a request, split into its fields."""

    method: str
    path: str
    version: str = ""


@dataclass(frozen=True)
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    Frozen: built once per connection and never modified. The router
    attaches captured path parameters by making a copy (with_params).

    Header lookup is CASE-SENSITIVE on the exact names handlers use
    ("User-Agent", "Accept-Encoding", "Content-Length").
    """

    method: str
    path: str
    version: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    client_address: Optional[Tuple[str, int]] = None
    path_params: Dict[str, str] = field(default_factory=dict)

    @property
    def user_agent(self) -> str:
        """User-Agent header, or "" if the client didn't send one."""
        return self.get_header("User-Agent")

    @property
    def content_length(self) -> int:
        """Size of the body that was read."""
        return len(self.body)

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value by its exact name.

        Args:
            name: Header name, matched case-sensitively.
            default: Returned when the header is absent.
        """
        return self.headers.get(name, default)

    def with_params(self, params: Dict[str, str]) -> "HTTPRequest":
        """Return a copy carrying the given path parameters."""
        return replace(self, path_params=dict(params))


# =============================================================================
# PARSER
# =============================================================================

class RequestParser:
    """
    Incremental HTTP/1.1 request parser.

    =========================================================================
    USAGE
    =========================================================================

        parser = RequestParser()

        # One step at a time (what the server does)
        line = parser.parse_request_line(conn.stream)
        headers = parser.parse_headers(conn.stream)
        body = parser.read_body(conn.stream, headers)

        # Or all at once
        request = parser.parse(conn.stream, conn.address)

    =========================================================================

    Args:
        header_policy: "skip" ignores header lines without a colon,
                       "strict" rejects them with MalformedHeader.
        max_body_size: Largest Content-Length accepted (None = no limit).
    """

    def __init__(self, header_policy: str = "skip", max_body_size: Optional[int] = None):
        if header_policy not in ("skip", "strict"):
            raise ValueError(f"Unknown header policy: {header_policy!r}")
        self.header_policy = header_policy
        self.max_body_size = max_body_size

    def parse(
        self,
        stream: ByteStream,
        client_address: Optional[Tuple[str, int]] = None,
    ) -> HTTPRequest:
        """
        Parse a complete request: request line, headers, and body.

        Raises:
            HTTPParseError: The request is malformed.
            StreamClosed: The stream ended before the request line or
                          header block was complete.
        """
        line = self.parse_request_line(stream)
        headers = self.parse_headers(stream)
        body = self.read_body(stream, headers)
        return HTTPRequest(
            method=line.method,
            path=line.path,
            version=line.version,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def parse_request_line(self, stream: ByteStream) -> RequestLine:
        """
        Read and split the request line.

            "GET /echo/abc HTTP/1.1\\r\\n"  →  RequestLine("GET", "/echo/abc", "HTTP/1.1")
            "GET /\\n"                      →  RequestLine("GET", "/", "")
            "GET\\r\\n"                      →  MalformedRequestLine

        Raises:
            MalformedRequestLine: Fewer than two fields.
            LineTooLong: Line over the stream's limit.
            StreamClosed: No complete line before the stream ended.
        """
        raw = self._read_line(stream)

        # bytes.split() with no argument splits on runs of ASCII whitespace
        # and drops the trailing \r\n along the way
        parts = [part.decode(WIRE_ENCODING) for part in raw.split()]
        if len(parts) < 2:
            raise MalformedRequestLine(f"Invalid request line: {raw!r}")

        method, path = parts[0], parts[1]
        version = parts[2] if len(parts) > 2 else ""
        return RequestLine(method=method, path=path, version=version)

    def parse_headers(self, stream: ByteStream) -> Dict[str, str]:
        """
        Read header lines up to (and including) the blank line.

        =====================================================================
        HEADER FORMAT
        =====================================================================

            Name: Value\\r\\n
            ──┬─  ──┬──
              │     └── Value, surrounding whitespace trimmed
              └──────── Name, split at the FIRST colon, trimmed

            "Host: localhost:42069" → {"Host": "localhost:42069"}

        Repeated names: the last one wins. Names are stored as sent.

        =====================================================================

        Raises:
            MalformedHeader: Colon-less line under the strict policy.
            LineTooLong: Line over the stream's limit.
            StreamClosed: The stream ended before the blank line.
        """
        headers: Dict[str, str] = {}

        while True:
            line = self._read_line(stream).strip()
            if not line:
                return headers

            name, sep, value = line.partition(b":")
            if not sep:
                if self.header_policy == "strict":
                    raise MalformedHeader(f"Header line without colon: {line!r}")
                logger.debug(f"Skipping header line without colon: {line!r}")
                continue

            headers[name.strip().decode(WIRE_ENCODING)] = value.strip().decode(WIRE_ENCODING)

    def read_body(self, stream: ByteStream, headers: Dict[str, str]) -> bytes:
        """
        Read the body declared by Content-Length.

        No Content-Length means no body: without a length (and without
        chunked encoding, which is not supported) there is no way to tell
        where the body ends.

        Raises:
            InvalidContentLength: Not a non-negative integer, or too large.
            TruncatedBody: The stream ended early.
        """
        raw_length = headers.get("Content-Length")
        if raw_length is None:
            return b""

        if not _CONTENT_LENGTH_PATTERN.fullmatch(raw_length):
            raise InvalidContentLength(f"Invalid Content-Length: {raw_length!r}")

        length = int(raw_length)
        if self.max_body_size is not None and length > self.max_body_size:
            raise InvalidContentLength(
                f"Content-Length {length} exceeds limit of {self.max_body_size}"
            )

        try:
            return stream.read_exact(length)
        except StreamClosed as e:
            raise TruncatedBody(expected=length, received=e.received) from e

    def _read_line(self, stream: ByteStream) -> bytes:
        try:
            return stream.read_line()
        except LineTooLongError as e:
            raise LineTooLong(str(e)) from e


def parse_request(data: bytes, **parser_options) -> HTTPRequest:
    """
    Convenience function to parse a request held entirely in memory.

    Args:
        data: Raw request bytes.
        **parser_options: Passed to RequestParser.

    Returns:
        Parsed HTTPRequest.
    """
    chunks = [data]
    stream = ByteStream(lambda n: chunks.pop() if chunks else b"")
    return RequestParser(**parser_options).parse(stream)
