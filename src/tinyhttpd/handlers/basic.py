"""
Root probe and User-Agent reflection.

Both are pure functions of the request: no I/O, no state.
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, ok


def root(request: HTTPRequest) -> HTTPResponse:
    """
    GET / - liveness probe.

    Always ``HTTP/1.1 200 OK\\r\\n\\r\\n``: no headers, no body, whatever
    the client sent.
    """
    return ok()


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """
    GET /user-agent - reflect the User-Agent header.

        GET /user-agent HTTP/1.1
        User-Agent: curl/8.4.0

        HTTP/1.1 200 OK
        Content-Type: text/plain
        Content-Length: 10

        curl/8.4.0

    A missing header reflects as an empty body with Content-Length: 0.
    """
    return ResponseBuilder().text(request.user_agent).build()
