"""
=============================================================================
HTTP STATUS CODES
=============================================================================

Only the status codes this server can actually send are defined:

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  200   │ OK                    - root probe, echo, user-agent,     │
    │        │                         file download                     │
    │  201   │ Created               - file upload                       │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  400   │ Bad Request           - malformed request line, header,   │
    │        │                         Content-Length or short body;     │
    │        │                         unsupported method on /files/     │
    │  404   │ Not Found             - file download of a missing file   │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  500   │ Internal Server Error - compression or file write failure │
    └────────┴───────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the server.

    IntEnum means members compare equal to their integer value:

        HTTPStatus.OK == 200           # True
        f"{HTTPStatus.NOT_FOUND}"      # "404"
    """

    OK = 200                        # Standard success response
    CREATED = 201                   # File written (POST /files/...)

    BAD_REQUEST = 400               # Malformed request
    NOT_FOUND = 404                 # File doesn't exist

    INTERNAL_SERVER_ERROR = 500     # Server failed to produce the response

    def __str__(self) -> str:
        # IntEnum.__str__ changed across Python versions; pin it to the code
        return str(self.value)

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES[self]

    @property
    def is_success(self) -> bool:
        """Check if this is a 2xx (success) status code."""
        return 200 <= self < 300

    @property
    def is_error(self) -> bool:
        """Check if this is an error status code (4xx or 5xx)."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
