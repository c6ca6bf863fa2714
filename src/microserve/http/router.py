"""
=============================================================================
ROUTE TABLE
=============================================================================

Maps exact resource strings to handler functions.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Incoming Request                                                   │
    │   GET /counter                                                       │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  ROUTE TABLE (registration order)                            │   │
    │   │                                                              │   │
    │   │   /              → index                                     │   │
    │   │   /counter       → counter          ← MATCH (exact string)   │   │
    │   │   /public/a.css  → static file                               │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                             │
    │        ▼                                                             │
    │   counter(request, session)                                          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
MATCHING RULES
=============================================================================

1. EXACT STRING EQUALITY on the whole resource. No prefixes, no
   parameters, no wildcards, no trailing-slash normalization.
       "/users"  matches  "/users"
       "/users"  does not match "/users/", "/users?page=2", "/Users"

2. ONE HANDLER PER PATH. Registering a path a second time is a silent
   no-op: the first handler stays active and register() hands back the
   route that was already there.

3. Routes are matched regardless of method. The table is keyed by path
   only; GET and POST on the same path reach the same handler.

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Union

from .request import Request
from .response import HTTPResponse


logger = logging.getLogger(__name__)


# Handler: takes the request and the caller's mutable session, returns the
# response body (str or bytes) or a ready-made HTTPResponse such as a
# redirect. The session type is left open here to keep the http package
# independent of the session store.
Handler = Callable[[Request, "Session"], Union[str, bytes, HTTPResponse]]


@dataclass(frozen=True)
class Route:
    """
    A (path, handler) binding.

    Attributes:
        path:    Resource string this route answers, compared exactly
        handler: Callable invoked with (request, session)
    """

    path: str
    handler: Handler


class RouteTable:
    """
    Ordered collection of routes with at most one route per path.

    Usage:
        routes = RouteTable()

        @routes.route("/hello")
        def hello(request, session):
            return "Hello!"

        routes.register("/bye", lambda request, session: "Bye!")

        route = routes.lookup("/hello")
        body = route.handler(request, session)
    """

    def __init__(self):
        self._routes: List[Route] = []

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def lookup(self, path: str) -> Optional[Route]:
        """
        Find the route registered for exactly this path.

        Linear scan in registration order; first match wins.

        Returns:
            The Route, or None when nothing is registered for the path.
        """
        for route in self._routes:
            if route.path == path:
                return route
        return None

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def register(self, path: str, handler: Handler) -> Route:
        """
        Register a handler for a path.

        If the path is already registered nothing changes and the existing
        route is returned; compare `result.handler is handler` to find out
        whether the registration took effect.
        """
        existing = self.lookup(path)
        if existing is not None:
            logger.debug(f"Route {path} already registered, keeping first handler")
            return existing

        route = Route(path=path, handler=handler)
        self._routes.append(route)
        return route

    def route(self, path: str) -> Callable[[Handler], Handler]:
        """
        Decorator form of register().

            @routes.route("/users")
            def list_users(request, session):
                ...

        Returns the handler unchanged so decorators can be stacked.
        """
        def decorator(handler: Handler) -> Handler:
            self.register(path, handler)
            return handler
        return decorator

    # Method-named aliases, for readability at the call site. Matching is by
    # path only, so @get and @post on the same path do not coexist: the
    # first one registered wins.
    get = route
    post = route

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    def routes(self) -> List[Route]:
        """All registered routes, in registration order."""
        return list(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.lookup(path) is not None

    def __iter__(self) -> Iterator[Route]:
        return iter(list(self._routes))

    def log_routes(self) -> None:
        """Log the route listing at INFO (used at startup)."""
        logger.info(f"Registered routes ({len(self._routes)}):")
        for route in self._routes:
            name = getattr(route.handler, "__name__", type(route.handler).__name__)
            logger.info(f"  {route.path:30} → {name}")
