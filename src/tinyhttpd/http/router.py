"""
=============================================================================
URL ROUTER
=============================================================================

Ordered, first-match routing over a small fixed set of routes.

=============================================================================
ROUTE PATTERNS
=============================================================================

1. EXACT PATHS

   Pattern: /user-agent
   Matches: /user-agent
   Doesn't match: /user-agent/, /user-agents

2. PREFIX WILDCARD (*name): literal prefix, the remainder is captured

   Pattern: /echo/*text
   Matches: /echo/abc      → {"text": "abc"}
            /echo/a/b/c    → {"text": "a/b/c"}
            /echo/         → {"text": ""}
   Doesn't match: /echo

   The wildcard must be the last thing in the pattern. Matching is a plain
   str.startswith(), no regex, no segment splitting, no normalization.

=============================================================================
PRECEDENCE
=============================================================================

Routes are tried in registration order and the FIRST match wins:

    ┌────┬────────┬──────────────────┬───────┬─────────────────────────┐
    │ #  │ Method │ Pattern          │ Early │ Handler                 │
    ├────┼────────┼──────────────────┼───────┼─────────────────────────┤
    │ 1  │ GET    │ /                │  yes  │ root probe              │
    │ 2  │ GET    │ /echo/*text      │       │ echo (+gzip)            │
    │ 3  │ GET    │ /user-agent      │       │ user-agent reflection   │
    │ 4  │ any    │ /files/*filename │       │ file download / upload  │
    └────┴────────┴──────────────────┴───────┴─────────────────────────┘

An EARLY route only needs the request line. The server checks early
routes before reading headers, so GET / is answered even if the client
never finishes its header block.

=============================================================================
NO MATCH MEANS NO RESPONSE
=============================================================================

When nothing matches (GET /nope, POST /echo/x, ...) handle() returns None
and the server closes the connection WITHOUT writing a response. There is
no 404 fallback and no 405 with an Allow header.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Dict, List
import logging

from .request import HTTPRequest
from .response import HTTPResponse


logger = logging.getLogger(__name__)


# Handler: A function that takes a request and returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """
    Represents a registered route.

        Route(
            path="/files/*filename",   # Pattern as registered
            method=None,               # None = any method
            handler=files.handle,
            early=False,               # Needs headers and body
            prefix="/files/",          # Literal prefix (wildcard routes)
            param_name="filename",     # Capture name for the remainder
        )
    """

    path: str
    method: Optional[str]
    handler: Handler
    early: bool = False
    name: Optional[str] = None

    prefix: Optional[str] = field(default=None, repr=False)
    param_name: Optional[str] = field(default=None, repr=False)

    def matches(self, method: str, path: str) -> Optional[Dict[str, str]]:
        """
        Match a request against this route.

        Returns:
            Captured parameters ({} for exact routes), or None.
        """
        if self.method is not None and self.method != method:
            return None

        if self.prefix is None:
            return {} if path == self.path else None

        if path.startswith(self.prefix):
            return {self.param_name: path[len(self.prefix):]}
        return None


@dataclass
class RouteMatch:
    """
    Result of a successful route match.

    Example:
        Pattern: /echo/*text
        Path:    /echo/abc
        Result:  RouteMatch(route=<Route>, params={"text": "abc"})
    """
    route: Route
    params: Dict[str, str]


class Router:
    """
    HTTP request router.

    Routes are registered with decorators (Flask style) or add_route():

        router = Router()

        @router.get("/", early=True)
        def root(request):
            return ok()

        @router.get("/echo/*text")
        def echo(request):
            return ResponseBuilder().text(request.path_params["text"]).build()

        router.add_route("/files/*filename", files.handle)  # any method

    Method names are matched case-sensitively: "get" is not "GET".
    """

    def __init__(self):
        self._routes: List[Route] = []

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[str] = None,
        early: bool = False,
        name: Optional[str] = None,
    ) -> Route:
        """
        Register a route.

        Args:
            path: Exact path, or a literal prefix ending in ``*name``.
            handler: Function taking HTTPRequest, returning HTTPResponse.
            method: HTTP method, or None for any method.
            early: Route can be served from the request line alone.
            name: Optional name, used in logs.

        Returns:
            The registered Route.
        """
        prefix, param_name = self._compile_pattern(path)

        route = Route(
            path=path,
            method=method,
            handler=handler,
            early=early,
            name=name or getattr(handler, "__name__", None),
            prefix=prefix,
            param_name=param_name,
        )
        self._routes.append(route)
        return route

    def _compile_pattern(self, path: str):
        """
        Split a pattern into (literal prefix, parameter name).

            "/user-agent"       → (None, None)          exact match
            "/echo/*text"       → ("/echo/", "text")    prefix match
            "/files/*"          → ("/files/", "rest")   unnamed wildcard
        """
        if not path.startswith("/"):
            raise ValueError(f"Route path must start with '/': {path!r}")

        star = path.find("*")
        if star == -1:
            return None, None

        param_name = path[star + 1:] or "rest"
        if "/" in param_name or "*" in param_name:
            raise ValueError(f"Wildcard must be the last part of the pattern: {path!r}")

        return path[:star], param_name

    def route(self, path: str, method: Optional[str] = None, **kwargs) -> Callable[[Handler], Handler]:
        """
        Decorator for registering routes.

        Usage:
            @router.route("/files/*filename")
            def files(request):
                ...
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method, **kwargs)
            return handler
        return decorator

    def get(self, path: str, **kwargs) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(path, "GET", **kwargs)

    def post(self, path: str, **kwargs) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route(path, "POST", **kwargs)

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, method: str, path: str, early_only: bool = False) -> Optional[RouteMatch]:
        """
        Find the first route matching method and path.

        Args:
            method: Request method, compared case-sensitively.
            path: Request path, compared literally.
            early_only: Only consider routes flagged ``early``.

        Returns:
            RouteMatch if found, None otherwise.
        """
        for route in self._routes:
            if early_only and not route.early:
                continue

            params = route.matches(method, path)
            if params is not None:
                return RouteMatch(route=route, params=params)

        return None

    def dispatch(self, match: RouteMatch, request: HTTPRequest) -> HTTPResponse:
        """Call the matched handler with path parameters attached."""
        return match.route.handler(request.with_params(match.params))

    def handle(self, request: HTTPRequest) -> Optional[HTTPResponse]:
        """
        Route a request to its handler.

        Returns:
            The handler's response, or None when no route matches. None
            means "write nothing and close the connection".
        """
        match = self.match(request.method, request.path)
        if match is None:
            logger.debug(f"No route for {request.method} {request.path}")
            return None
        return self.dispatch(match, request)

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================

    def routes(self) -> List[Route]:
        """All registered routes, in precedence order."""
        return list(self._routes)

    def describe(self) -> List[str]:
        """
        One line per route, for startup logging.

            GET      /                  (early)
            ANY      /files/*filename
        """
        lines = []
        for route in self._routes:
            method = route.method or "ANY"
            suffix = "  (early)" if route.early else ""
            lines.append(f"{method:8} {route.path}{suffix}")
        return lines
