"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          HTTPServer                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   ServerConfig ───► SocketServer   accept loop, one conn at a time  │
    │                          │                                           │
    │                          ▼                                           │
    │                     Dispatcher     parse → match → session → call   │
    │                      │        │                                      │
    │                      ▼        ▼                                      │
    │               RouteTable   SessionStore                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The route table and session store belong to the server and live as long
as it does. Routes are registered before run(); sessions accumulate while
it runs and are lost when the process exits.
=============================================================================
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from .config import ServerConfig
from .core import SocketServer
from .dispatcher import Dispatcher
from .handlers.static import register_static_dir
from .http.request import RequestParser
from .http.router import Handler, Route, RouteTable
from .session import SessionStore


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Embeddable HTTP/1.1 server.

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(port=8080))

        @server.get("/")
        def index(request, session):
            visits = (session.get("visits", int) or 0) + 1
            session.set("visits", visits)
            return f"Visit number {visits}"

        @server.post("/login")
        def login(request, session):
            session.set("user", request.form["user"])
            return redirect("/")

        server.static("./public")   # /public/<file> for every file
        server.run()                # Blocks until Ctrl+C / shutdown()

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults are used if not provided.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)

        self._routes = RouteTable()
        self._sessions = SessionStore()
        self._dispatcher = Dispatcher(
            self._routes,
            self._sessions,
            RequestParser(
                max_body_size=self.config.max_body_size,
                max_line_size=self.config.max_line_size,
            ),
        )

        if self.config.static_dir:
            self.static(self.config.static_dir)

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def routes(self) -> RouteTable:
        return self._routes

    @property
    def sessions(self) -> SessionStore:
        return self._sessions

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); reports the real port when configured with 0."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(self, path: str, handler: Handler) -> Route:
        """
        Register a handler. A path that is already registered keeps its
        first handler; the existing route is returned.
        """
        return self._routes.register(path, handler)

    def route(self, path: str) -> Callable[[Handler], Handler]:
        """Decorator registering a handler for `path`."""
        return self._routes.route(path)

    def get(self, path: str) -> Callable[[Handler], Handler]:
        """Alias of route(); matching ignores the method."""
        return self._routes.route(path)

    def post(self, path: str) -> Callable[[Handler], Handler]:
        """Alias of route(); matching ignores the method."""
        return self._routes.route(path)

    def static(self, directory: Union[str, Path]) -> List[str]:
        """
        Serve every file under `directory` at /<dirname>/<relative path>.

        Returns:
            The registered route paths.
        """
        return register_static_dir(self._routes, directory)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start serving (blocking).

        Args:
            host: Override config host.
            port: Override config port.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        self._setup_logging()
        logger.info(f"Starting HTTP server on {self.config.host}:{self.config.port}")
        self._routes.log_routes()

        try:
            self._socket_server.start(self._dispatcher.resolve)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info(f"Server stopped ({len(self._sessions)} sessions issued)")

    def shutdown(self):
        """Stop the accept loop. Safe to call from another thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until run() is listening; False on timeout."""
        return self._socket_server.wait_until_ready(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """Block until run() has stopped listening; False on timeout."""
        return self._socket_server.wait_for_shutdown(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("microserve").setLevel(level)


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """
    Create a server instance.

    Example:
        app = create_app(ServerConfig(port=3000))

        @app.get("/")
        def index(request, session):
            return "Hello!"

        app.run()
    """
    return HTTPServer(config)
