"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Everything between "bytes on a socket" and "a handler function":

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   ByteStream ──► RequestParser ──► HTTPRequest ──► Router           │
    │                                                        │            │
    │                                                        ▼            │
    │   bytes ◄── HTTPResponse.to_bytes() ◄── HTTPResponse ◄── Handler   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    request.py       Request line, header and body parsing + errors
    response.py      HTTPResponse, ResponseBuilder, status-only helpers
    router.py        Ordered first-match router
    status_codes.py  HTTPStatus enum
    compression.py   gzip negotiation and compression
"""

from .request import (
    HTTPRequest,
    RequestLine,
    RequestParser,
    HTTPParseError,
    MalformedRequestLine,
    MalformedHeader,
    InvalidContentLength,
    TruncatedBody,
    LineTooLong,
    parse_request,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok,
    created,
    bad_request,
    not_found,
    internal_error,
    status_only,
)
from .router import Router, Route, RouteMatch
from .status_codes import HTTPStatus
from .compression import CompressionError, accepts_gzip, gzip_compress

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestLine",
    "RequestParser",
    "HTTPParseError",
    "MalformedRequestLine",
    "MalformedHeader",
    "InvalidContentLength",
    "TruncatedBody",
    "LineTooLong",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "created",
    "bad_request",
    "not_found",
    "internal_error",
    "status_only",

    # Routing
    "Router",
    "Route",
    "RouteMatch",

    # Status codes
    "HTTPStatus",

    # Compression
    "CompressionError",
    "accepts_gzip",
    "gzip_compress",
]
