"""
=============================================================================
ECHO HANDLER
=============================================================================

GET /echo/<text> sends <text> back as the body.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  Accept-Encoding negotiates gzip?                                   │
    ├──────────────┬──────────────────────────────────────────────────────┤
    │  no          │  200 OK                                              │
    │              │  Content-Type: text/plain                            │
    │              │  Content-Length: <len(text)>                         │
    │              │                                                      │
    │              │  <text>                                              │
    ├──────────────┼──────────────────────────────────────────────────────┤
    │  yes         │  200 OK                                              │
    │              │  Content-Type: text/plain                            │
    │              │  Content-Encoding: gzip                              │
    │              │  Content-Length: <len(gzip(text))>                   │
    │              │                                                      │
    │              │  <gzip(text)>                                        │
    ├──────────────┼──────────────────────────────────────────────────────┤
    │  compression │  500 Internal Server Error (no headers, no body)     │
    │  fails       │                                                      │
    └──────────────┴──────────────────────────────────────────────────────┘

The text is the raw path remainder: no percent-decoding, no query string
splitting. "/echo/a%20b?x" echoes "a%20b?x".

=============================================================================
"""

import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, internal_error, BODY_ENCODING
from ..http.compression import (
    CompressionError, accepts_gzip, gzip_compress, DEFAULT_LEVEL, GZIP,
)


logger = logging.getLogger(__name__)


class EchoHandler:
    """
    Echo the path remainder, gzip-compressed when the client accepts it.

    Args:
        param: Name of the route parameter holding the text.
        compression_level: gzip level 0-9.
    """

    def __init__(self, param: str = "text", compression_level: int = DEFAULT_LEVEL):
        self.param = param
        self.compression_level = compression_level

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Build the echo response for one request."""
        text = request.path_params.get(self.param, "")

        if not accepts_gzip(request.get_header("Accept-Encoding", None)):
            return ResponseBuilder().text(text).build()

        try:
            compressed = gzip_compress(text.encode(BODY_ENCODING), level=self.compression_level)
        except CompressionError as e:
            logger.error(f"Error compressing response body: {e}")
            return internal_error()

        return (ResponseBuilder()
            .content_type("text/plain")
            .header("Content-Encoding", GZIP)
            .body(compressed)
            .content_length()
            .build())
