"""
=============================================================================
TINYHTTPD - A SMALL HTTP/1.1 SERVER ON RAW SOCKETS
=============================================================================

One request per connection, one thread per connection, four routes:

    GET  /                   200 OK, nothing else
    GET  /echo/<text>        <text> back, gzip if Accept-Encoding allows
    GET  /user-agent         the User-Agent header back
    GET  /files/<name>       file contents from the served directory
    POST /files/<name>       request body stored in the served directory

=============================================================================
PACKAGE LAYOUT
=============================================================================

    tinyhttpd/
    ├── core/            Sockets: accept loop, connection, byte stream
    ├── http/            Protocol: parsing, responses, routing, gzip
    ├── handlers/        The four endpoints
    ├── config.py        ServerConfig (defaults, env vars, validation)
    ├── server.py        HTTPServer: wires it all together
    └── __main__.py      python -m tinyhttpd

=============================================================================
QUICK START
=============================================================================

    python -m tinyhttpd /tmp/files --port 4221

    curl -v http://localhost:4221/echo/hello
    curl -v --data-binary @notes.txt http://localhost:4221/files/notes.txt

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
