"""
=============================================================================
HTTP SERVER - MAIN ORCHESTRATOR
=============================================================================

Ties the pieces together: socket server, request parser, router,
handlers, and response writer.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. ACCEPT              SocketServer accepts, wraps in Connection
    2. SPAWN               One daemon thread per connection
    3. REQUEST LINE        parse_request_line(stream)
                           └── closed/timed out → no response, close
                           └── < 2 fields       → 400, close
    4. EARLY ROUTES        GET / answered now, headers never read
    5. HEADERS             parse_headers(stream)
                           └── closed/timed out → 400, close
    6. BODY                read_body(stream, headers)
                           └── bad length / short body → 400, close
    7. ROUTE               router.match(method, path)
                           └── no match → no response, close
    8. HANDLER             handler(request) → HTTPResponse
                           └── raises → 500
    9. WRITE               response.to_bytes() → sendall
   10. CLOSE               always; there is no keep-alive

=============================================================================
ERROR → RESPONSE MAPPING
=============================================================================

    ┌──────────────────────────────────┬──────────────────────────────────┐
    │ Failure                          │ Written to the client            │
    ├──────────────────────────────────┼──────────────────────────────────┤
    │ StreamClosed on request line     │ nothing                          │
    │ StreamClosed on headers          │ HTTP/1.1 400 Bad Request         │
    │ HTTPParseError (any)             │ HTTP/1.1 400 Bad Request         │
    │ No route matched                 │ nothing                          │
    │ Handler exception                │ HTTP/1.1 500 Internal Server ... │
    └──────────────────────────────────┴──────────────────────────────────┘

Exactly one response, or none, per connection.

=============================================================================
"""

import logging
import threading
import time
from typing import Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, ByteStream, StreamClosed
from .handlers import EchoHandler, FileHandler, root, user_agent
from .http import (
    HTTPRequest, RequestLine, RequestParser, HTTPParseError,
    HTTPResponse, HTTPStatus, Router, RouteMatch,
    internal_error, status_only,
)


logger = logging.getLogger(__name__)

# One line per connection, Apache-ish: ip "METHOD path" status bytes duration
access_logger = logging.getLogger("tinyhttpd.access")


class HTTPServer:
    """
    Minimal HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(port=4221, directory="/tmp/files"))
        server.run()  # Blocks until Ctrl+C

    The route set is fixed: /, /echo/*text, /user-agent, /files/*filename.

    =========================================================================
    TESTING WITHOUT SOCKETS
    =========================================================================

    handle() takes any ByteStream, so the whole request path can be
    exercised with canned bytes:

        stream = ByteStream(recv_from_chunks([b"GET / HTTP/1.1\\r\\n"]))
        server.handle(stream).to_bytes()   # b"HTTP/1.1 200 OK\\r\\n\\r\\n"

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Initialize the HTTP server.

        Args:
            config: Server configuration. Uses defaults if not provided.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)

        self._parser = RequestParser(
            header_policy=self.config.header_policy,
            max_body_size=self.config.max_body_size,
        )

        self._router = Router()
        self._register_routes()

    def _register_routes(self):
        """
        Register the fixed route set, in precedence order.

        Order matters: the router is first-match.
        """
        echo = EchoHandler()
        files = FileHandler(self.config.directory)

        self._router.add_route("/", root, method="GET", early=True)
        self._router.add_route("/echo/*text", echo.handle, method="GET", name="echo")
        self._router.add_route("/user-agent", user_agent, method="GET")
        self._router.add_route("/files/*filename", files.handle, name="files")

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def router(self) -> Router:
        """The router holding the fixed route set."""
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening on port 0."""
        return self._socket_server.address

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server (blocking).

        Blocks until shutdown() is called or SIGINT/SIGTERM arrives.

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()

        logger.info(f"Serving files from {self.config.directory}")
        for line in self._router.describe():
            logger.debug(f"Route: {line}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. In-flight connections finish."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is up."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        # No-op if the application already configured the root logger
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("tinyhttpd").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Start a worker thread for a freshly accepted connection.

        Called on the accept loop; must not block.
        """
        worker = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        worker.start()

    def _process_connection(self, conn: Connection):
        """
        Serve the single request on a connection (runs in worker thread).

        Args:
            conn: The client connection.
        """
        started = time.time()
        line: Optional[RequestLine] = None
        response: Optional[HTTPResponse] = None

        with conn:  # Context manager ensures connection is closed
            conn.state = ConnectionState.READING
            try:
                line, response = self._serve(conn.stream, conn.address)
            except Exception as e:
                # Parsing and dispatch convert their own errors; this is a bug
                logger.exception(f"[{conn.id}] Connection error: {e}")
                return

            if response is not None:
                conn.send_response(response.to_bytes())

        self._log_access(conn, line, response, started)

    def handle(
        self,
        stream: ByteStream,
        client_address: Optional[Tuple[str, int]] = None,
    ) -> Optional[HTTPResponse]:
        """
        Read one request from ``stream`` and produce its response.

        Returns:
            The response to write, or None when nothing should be written
            (stream closed before a request line, or no route matched).
        """
        _, response = self._serve(stream, client_address)
        return response

    def _serve(
        self,
        stream: ByteStream,
        client_address: Optional[Tuple[str, int]],
    ) -> Tuple[Optional[RequestLine], Optional[HTTPResponse]]:
        # ─────────────────────────────────────────────────────────────────
        # REQUEST LINE
        # ─────────────────────────────────────────────────────────────────
        try:
            line = self._parser.parse_request_line(stream)
        except StreamClosed as e:
            logger.debug(f"Error reading request line: {e}")
            return None, None
        except HTTPParseError as e:
            logger.info(f"Bad request line: {e}")
            return None, status_only(e.status_code)

        logger.debug(f"Request line: {line.method} {line.path} {line.version}")

        # ─────────────────────────────────────────────────────────────────
        # EARLY ROUTES (no headers needed)
        # ─────────────────────────────────────────────────────────────────
        early = self._router.match(line.method, line.path, early_only=True)
        if early is not None:
            request = HTTPRequest(
                method=line.method,
                path=line.path,
                version=line.version,
                client_address=client_address,
            )
            return line, self._dispatch(early, request)

        # ─────────────────────────────────────────────────────────────────
        # HEADERS + BODY
        # ─────────────────────────────────────────────────────────────────
        try:
            headers = self._parser.parse_headers(stream)
            logger.debug(f"Headers: {headers}")
            body = self._parser.read_body(stream, headers)
            logger.debug(f"Body: {len(body)} bytes")
        except StreamClosed as e:
            logger.info(f"Error reading headers: {e}")
            return line, status_only(HTTPStatus.BAD_REQUEST)
        except HTTPParseError as e:
            logger.info(f"Bad request: {e}")
            return line, status_only(e.status_code)

        request = HTTPRequest(
            method=line.method,
            path=line.path,
            version=line.version,
            headers=headers,
            body=body,
            client_address=client_address,
        )

        # ─────────────────────────────────────────────────────────────────
        # ROUTE
        # ─────────────────────────────────────────────────────────────────
        match = self._router.match(request.method, request.path)
        if match is None:
            logger.debug(f"No route for {request.method} {request.path}, closing without response")
            return line, None

        return line, self._dispatch(match, request)

    def _dispatch(self, match: RouteMatch, request: HTTPRequest) -> HTTPResponse:
        """Run the handler; an exception becomes a 500."""
        try:
            return self._router.dispatch(match, request)
        except Exception as e:
            logger.exception(f"Handler error for {request.method} {request.path}: {e}")
            return internal_error()

    def _log_access(
        self,
        conn: Connection,
        line: Optional[RequestLine],
        response: Optional[HTTPResponse],
        started: float,
    ):
        duration_ms = (time.time() - started) * 1000
        request_text = f"{line.method} {line.path}" if line else "-"
        status = response.status.value if response else "-"
        size = len(response.body) if response else 0
        access_logger.info(
            f'{conn.client_ip} "{request_text}" {status} {size} {duration_ms:.2f}ms'
        )


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Create an HTTP server application.

    Example:
        app = create_app(ServerConfig(port=4221, directory="/tmp"))
        app.run()
    """
    return HTTPServer(config)
