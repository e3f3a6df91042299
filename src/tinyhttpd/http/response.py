"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTP/1.1 responses and serializes them to wire bytes.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  STATUS LINE       HTTP/1.1 200 OK\\r\\n                              │
    │                    ────┬─── ─┬─ ─┬─                                 │
    │                    Version  Code Phrase                             │
    │                                                                      │
    │  HEADERS           Content-Type: text/plain\\r\\n                     │
    │  (in order)        Content-Encoding: gzip\\r\\n                       │
    │                    Content-Length: 23\\r\\n                           │
    │                                                                      │
    │  EMPTY LINE        \\r\\n                                              │
    │                                                                      │
    │  BODY              <23 raw bytes>                                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
NOTHING IS ADDED BEHIND YOUR BACK
=============================================================================

Many servers quietly add Date, Server, or Content-Length to every
response. This one does not: the bytes on the wire are exactly the status
line plus the headers the handler chose, in the order it chose them.

    HTTPResponse(HTTPStatus.OK).to_bytes()  ==  b"HTTP/1.1 200 OK\\r\\n\\r\\n"

Headers are an ordered list of (name, value) pairs rather than a dict,
because their order is visible to clients and part of each route's
contract.

=============================================================================
BUILDER PATTERN
=============================================================================

    response = (ResponseBuilder()
        .status(HTTPStatus.OK)
        .header("Content-Type", "text/plain")
        .body(b"abc")
        .content_length()
        .build())

Each method returns `self`, so calls chain; build() produces the final
HTTPResponse.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Optional, List, Tuple, Union

from .status_codes import HTTPStatus


CRLF = "\r\n"

# Response text (echo payloads, header values) is sent back byte-for-byte
BODY_ENCODING = "iso-8859-1"


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    Handlers return one of these; the server calls to_bytes() and writes
    the result to the connection.

        Handler returns          to_bytes()              Socket sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {self.status.value} {self.status.phrase}"

    def get_header(self, name: str) -> Optional[str]:
        """Value of the first header with this exact name, or None."""
        for header_name, value in self.headers:
            if header_name == name:
                return value
        return None

    def to_bytes(self) -> bytes:
        """
        Serialize the response to bytes for socket.sendall().

            HTTP/1.1 200 OK\\r\\n          ← Status line
            Content-Type: text/plain\\r\\n ← Headers, in list order
            Content-Length: 3\\r\\n
            \\r\\n                         ← Empty line (separator)
            abc                          ← Body bytes, nothing after

        Returns:
            Complete HTTP response as bytes.
        """
        head = self.status_line + CRLF
        for name, value in self.headers:
            head += f"{name}: {value}{CRLF}"
        head += CRLF

        return head.encode(BODY_ENCODING) + self.body


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

    Headers are appended in call order. Calling header() twice with the
    same name sends the header twice; nothing is merged.

    ==========================================================================
    USAGE EXAMPLES
    ==========================================================================

    # Status-only
    response = ResponseBuilder().status(HTTPStatus.CREATED).build()

    # Plain text with explicit length
    response = ResponseBuilder().text("abc").build()

    # Binary download
    response = (ResponseBuilder()
        .header("Content-Type", "application/octet-stream")
        .body(data)
        .content_length()
        .build())

    ==========================================================================
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: List[Tuple[str, str]] = []
        self._body: bytes = b""

    # =========================================================================
    # STATUS
    # =========================================================================

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        """Set the HTTP status code."""
        self._status = status
        return self

    # =========================================================================
    # HEADERS
    # =========================================================================

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """
        Append a response header.

        Args:
            name: Header name, sent exactly as given.
            value: Header value.
        """
        self._headers.append((name, value))
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        """Append a Content-Type header."""
        return self.header("Content-Type", content_type)

    def content_length(self) -> "ResponseBuilder":
        """
        Append a Content-Length header for the body set SO FAR.

        Call it after body(), at the position the header should appear.
        """
        return self.header("Content-Length", str(len(self._body)))

    # =========================================================================
    # BODY
    # =========================================================================

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set the response body.

        Strings are encoded as ISO-8859-1 so text that came off the wire
        goes back out as the same bytes.
        """
        if isinstance(body, str):
            self._body = body.encode(BODY_ENCODING)
        else:
            self._body = bytes(body)
        return self

    def text(self, text: Union[str, bytes]) -> "ResponseBuilder":
        """
        Plain text body with Content-Type and Content-Length headers.

            Content-Type: text/plain
            Content-Length: <bytes>
        """
        return self.content_type("text/plain").body(text).content_length()

    def build(self) -> HTTPResponse:
        """Build the final HTTPResponse."""
        return HTTPResponse(
            status=self._status,
            headers=list(self._headers),
            body=self._body,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
# Status-only responses: status line, blank line, nothing else.

def ok() -> HTTPResponse:
    """200 OK with no headers and no body."""
    return HTTPResponse(status=HTTPStatus.OK)


def created() -> HTTPResponse:
    """201 Created with no headers and no body."""
    return HTTPResponse(status=HTTPStatus.CREATED)


def bad_request() -> HTTPResponse:
    """400 Bad Request with no headers and no body."""
    return HTTPResponse(status=HTTPStatus.BAD_REQUEST)


def not_found() -> HTTPResponse:
    """404 Not Found with no headers and no body."""
    return HTTPResponse(status=HTTPStatus.NOT_FOUND)


def internal_error() -> HTTPResponse:
    """500 Internal Server Error with no headers and no body."""
    return HTTPResponse(status=HTTPStatus.INTERNAL_SERVER_ERROR)


def status_only(status: HTTPStatus) -> HTTPResponse:
    """Response with just a status line, for any supported status."""
    return HTTPResponse(status=HTTPStatus(status))
