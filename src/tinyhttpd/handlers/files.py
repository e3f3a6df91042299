"""
=============================================================================
FILE HANDLER
=============================================================================

Upload and download files under a root directory.

    POST /files/<name>   body → <root>/<name>     201 Created
    GET  /files/<name>   <root>/<name> → body     200 OK (octet-stream)

=============================================================================
OUTCOMES
=============================================================================

    ┌────────┬──────────────────────────────┬──────────────────────────────┐
    │ Method │ Result                       │ Response                     │
    ├────────┼──────────────────────────────┼──────────────────────────────┤
    │ POST   │ written (created/truncated)  │ 201, no headers, no body     │
    │ POST   │ OSError, NUL in name         │ 500, no headers, no body     │
    │ GET    │ read                         │ 200 + octet-stream + length  │
    │ GET    │ missing, dir, NUL in name    │ 404, no headers, no body     │
    │ other  │ -                            │ 400, no headers, no body     │
    └────────┴──────────────────────────────┴──────────────────────────────┘

=============================================================================
SECURITY: PATH TRAVERSAL IS NOT BLOCKED
=============================================================================

The file path is a plain join of the root and the URL remainder:

    root = /srv/files
    GET  /files/../../etc/passwd   →  /srv/files/../../etc/passwd
    POST /files/../x               →  writes /srv/x

Nothing normalizes the path or checks that it stays inside the root, and
an absolute remainder (/files//etc/passwd) resolves to the absolute path
itself. Anyone who can reach the server can read and overwrite any file
the server process can. Escapes are logged as warnings but still served.
Do not expose this server to untrusted clients.

=============================================================================
CONCURRENCY
=============================================================================

Reads and writes are plain synchronous file I/O with no locking. A GET
racing a POST to the same name can observe a partially written file.

=============================================================================
"""

import os
import logging

from ..http.request import HTTPRequest, WIRE_ENCODING
from ..http.response import (
    HTTPResponse, ResponseBuilder,
    bad_request, created, internal_error, not_found,
)


logger = logging.getLogger(__name__)


class FileHandler:
    """
    Serve and store files under ``root_dir``.

    Usage:
        files = FileHandler("/tmp/data")
        router.add_route("/files/*filename", files.handle)

    Args:
        root_dir: Directory the URL remainder is joined onto. It is NOT
                  required to exist; requests against a missing root fail
                  like any other missing file (404 / 500).
        param: Name of the route parameter holding the file name.
    """

    def __init__(self, root_dir: str, param: str = "filename"):
        self.root_dir = root_dir
        self.param = param

    def resolve(self, filename: str) -> bytes:
        """
        Join a file name onto the root directory.

        Plain os.path.join, see the module docstring. The name is turned
        back into the bytes that arrived on the wire, so the file on disk
        is named byte-for-byte as in the request path.
        """
        path = os.path.join(os.fsencode(self.root_dir), filename.encode(WIRE_ENCODING))

        try:
            root = os.path.realpath(os.fsencode(self.root_dir))
            escapes = os.path.commonpath([root, os.path.realpath(path)]) != root
        except ValueError:
            # Embedded NUL: not a usable path, open() rejects it too
            escapes = False
        if escapes:
            logger.warning(f"Path escapes files root: {filename!r} -> {path!r}")

        return path

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """Dispatch on method: POST writes, GET reads, anything else is 400."""
        path = self.resolve(request.path_params.get(self.param, ""))

        if request.method == "POST":
            return self._write(path, request.body)
        if request.method == "GET":
            return self._read(path)
        return bad_request()

    def _write(self, path: bytes, data: bytes) -> HTTPResponse:
        try:
            with open(path, "wb") as f:
                f.write(data)
        except (OSError, ValueError) as e:
            logger.error(f"Error writing file {path!r}: {e}")
            return internal_error()

        logger.debug(f"Wrote {len(data)} bytes to {path!r}")
        return created()

    def _read(self, path: bytes) -> HTTPResponse:
        try:
            with open(path, "rb") as f:
                data = f.read()
        except (OSError, ValueError) as e:
            logger.debug(f"Cannot read file {path!r}: {e}")
            return not_found()

        return (ResponseBuilder()
            .content_type("application/octet-stream")
            .body(data)
            .content_length()
            .build())
