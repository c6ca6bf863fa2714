"""
=============================================================================
MICROSERVE - Minimal Embeddable HTTP/1.1 Server
=============================================================================

A small HTTP server built on raw Python sockets, meant to be embedded in a
program that wants to answer a handful of exact routes with per-client
session state.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     MICROSERVE ARCHITECTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. SOCKET LAYER                                                   │
    │      - TCP listener and accept loop                                 │
    │      - One connection served at a time, one request per connection  │
    │                                                                      │
    │   2. WIRE PARSER                                                    │
    │      - Request line, raw header block, Content-Length body         │
    │      - Session id pulled from the Cookie header                     │
    │                                                                      │
    │   3. ROUTE TABLE                                                    │
    │      - Exact string match on the resource                           │
    │      - First registration of a path wins                            │
    │                                                                      │
    │   4. SESSION STORE                                                  │
    │      - Integer ids, issued once, never reused                       │
    │      - Typed key/value reads                                        │
    │                                                                      │
    │   5. RESPONSE FORMATTER                                             │
    │      - 200 with Set-Cookie, fixed 404, redirects, 4xx/500           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    microserve/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m microserve)
    ├── server.py            # HTTPServer facade
    ├── config.py            # ServerConfig dataclass
    ├── dispatcher.py        # Per-connection dispatch state machine
    ├── session.py           # Session and SessionStore
    ├── core/                # Low-level components
    │   ├── socket_server.py # TCP socket handling
    │   └── connection.py    # Connection wrapper
    ├── http/                # HTTP protocol components
    │   ├── request.py       # Wire parser
    │   ├── response.py      # Response formatter
    │   ├── router.py        # Route table
    │   ├── method.py        # GET / POST
    │   ├── status_codes.py  # Status enum
    │   └── errors.py        # HTTPParseError
    └── handlers/            # Ready-made handlers
        ├── static.py        # Static directory routes
        └── template.py      # $name templates

=============================================================================
QUICK START
=============================================================================

    from microserve import HTTPServer, ServerConfig, redirect

    server = HTTPServer(ServerConfig(port=8080))

    @server.get("/")
    def index(request, session):
        visits = (session.get("visits", int) or 0) + 1
        session.set("visits", visits)
        return f"You have been here {visits} times"

    @server.get("/reset")
    def reset(request, session):
        session.remove("visits")
        return redirect("/")

    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig
from .session import Session, SessionStore, SessionLookupError
from .http import (
    HTTPParseError,
    HTTPResponse,
    HTTPStatus,
    Method,
    Request,
    RouteTable,
    from_forms,
    not_found,
    ok,
    redirect,
)
from .handlers import render_template

__all__ = [
    "HTTPServer",
    "create_app",
    "ServerConfig",
    "Session",
    "SessionStore",
    "SessionLookupError",
    "HTTPParseError",
    "HTTPResponse",
    "HTTPStatus",
    "Method",
    "Request",
    "RouteTable",
    "from_forms",
    "not_found",
    "ok",
    "redirect",
    "render_template",
    "__version__",
]
