"""
=============================================================================
DISPATCHER
=============================================================================

Runs one connection from raw bytes to written response.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                   PER-CONNECTION STATE MACHINE                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   PARSE ──── HTTPParseError ───────────────────────────► REJECT     │
    │     │                                                    (4xx)      │
    │     ▼                                                                │
    │   ROUTE_MATCH ── no route ─────────────────────────────► NOT_FOUND  │
    │     │                                                    (404)      │
    │     ▼                                                                │
    │   SESSION_RESOLVE   known id → reuse, otherwise create()             │
    │     │                                                                │
    │     ▼                                                                │
    │   INVOKE ─────── handler raised ───────────────────────► FAIL       │
    │     │                                                    (500/400)  │
    │     ▼                                                                │
    │   RESPOND   200 + Set-Cookie + body                                  │
    │                                                                      │
    │   Every terminal state writes exactly one response, then the         │
    │   connection is closed.                                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

NOT_FOUND never touches the session store: a miss does not allocate a
session id. Every routed request echoes its session id back, whether the
id was reused or freshly created.

=============================================================================
FAILURE HANDLING
=============================================================================

    Malformed request        → 4xx from HTTPParseError.status_code
    Handler HTTPParseError   → 4xx (e.g. request.form on a bad body)
    Handler exception        → 500, traceback logged
    Client gone mid-write    → logged, connection closed

Nothing escapes resolve(): the accept loop always moves on to the next
connection.
=============================================================================
"""

import logging
from dataclasses import replace
from enum import Enum
from typing import BinaryIO, Optional, Tuple, Union

from .core.connection import Connection, ConnectionState
from .http.errors import HTTPParseError
from .http.request import Request, RequestParser
from .http.response import HTTPResponse, error_response, internal_error, not_found, ok
from .http.router import RouteTable
from .session import SessionStore


logger = logging.getLogger(__name__)
access_logger = logging.getLogger("microserve.access")


class DispatchState(Enum):
    """Where a request ended up; reported in the access log."""
    RESPOND = "respond"
    NOT_FOUND = "not_found"
    REJECT = "reject"
    FAIL = "fail"


class Dispatcher:
    """
    Parse → match → resolve session → invoke → format.

    The dispatcher owns no state of its own. The route table and session
    store are handed in and shared with the server that built it; only
    one connection is dispatched at a time, so they need no locking.

    Usage:
        dispatcher = Dispatcher(routes, sessions)

        # From a live connection (writes and closes):
        dispatcher.resolve(conn)

        # From any binary stream (returns the response bytes):
        data = dispatcher.handle(io.BytesIO(b"GET / HTTP/1.1\\r\\n\\r\\n"))
    """

    def __init__(
        self,
        routes: RouteTable,
        sessions: SessionStore,
        parser: Optional[RequestParser] = None,
    ):
        self.routes = routes
        self.sessions = sessions
        self.parser = parser or RequestParser()

    # =========================================================================
    # ENTRY POINTS
    # =========================================================================

    def resolve(self, conn: Connection) -> None:
        """
        Serve one request on a connection, then close it.

        Called by the accept loop for every accepted connection.
        """
        with conn:
            try:
                try:
                    request = self.parser.parse(conn.reader, conn.address)
                except HTTPParseError as e:
                    response = self.reject(e, conn.address)
                else:
                    conn.state = ConnectionState.PROCESSING
                    response = self.respond(request)

                if not conn.send_response(response.to_bytes()):
                    logger.info(f"[{conn.id}] Client disconnected before the response was sent")
            except Exception as e:
                logger.exception(f"[{conn.id}] Connection error: {e}")

    def handle(
        self,
        stream: BinaryIO,
        client_address: Tuple[str, int] = ("", 0),
    ) -> bytes:
        """
        Serve one request read from `stream` and return the response bytes.
        """
        try:
            request = self.parser.parse(stream, client_address)
        except HTTPParseError as e:
            return self.reject(e, client_address).to_bytes()
        return self.respond(request).to_bytes()

    # =========================================================================
    # STATES
    # =========================================================================

    def reject(self, error: HTTPParseError, client_address: Tuple[str, int]) -> HTTPResponse:
        """REJECT: turn a parse failure into a 4xx response."""
        logger.warning(f"Rejected request from {client_address[0]}: {error}")
        response = error_response(error.status_code, str(error))
        self._log_access(None, response, DispatchState.REJECT)
        return response

    def respond(self, request: Request) -> HTTPResponse:
        """
        Run a parsed request through dispatch(), converting handler
        failures into error responses.
        """
        routed = request.resource in self.routes
        try:
            response = self.dispatch(request)
            state = DispatchState.RESPOND if routed else DispatchState.NOT_FOUND
        except HTTPParseError as e:
            logger.warning(f"Handler rejected {request.resource}: {e}")
            response = error_response(e.status_code, str(e))
            state = DispatchState.FAIL
        except Exception as e:
            logger.exception(f"Handler error on {request.resource}: {e}")
            response = internal_error()
            state = DispatchState.FAIL

        self._log_access(request, response, state)
        return response

    def dispatch(self, request: Request) -> HTTPResponse:
        """
        ROUTE_MATCH → SESSION_RESOLVE → INVOKE for a parsed request.

        Exceptions raised by the handler propagate to the caller.

        Returns:
            not_found() on a route miss, otherwise the handler's response
            carrying the resolved session id.
        """
        route = self.routes.lookup(request.resource)
        if route is None:
            return not_found()

        session_id = self.sessions.resolve(request.session)
        session = self.sessions.get(session_id)

        result = route.handler(request, session)
        return self._to_response(result, session_id)

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _to_response(
        result: Union[str, bytes, HTTPResponse],
        session_id: int,
    ) -> HTTPResponse:
        """
        Wrap a handler's return value.

        str/bytes become a 200 body; an HTTPResponse (redirect, ...) is
        sent as a copy. Either way the session id is attached.
        """
        if isinstance(result, HTTPResponse):
            # Copy, so a response object shared between requests keeps no id
            return replace(result, headers=dict(result.headers), session_id=session_id)
        if isinstance(result, (str, bytes, bytearray)):
            return ok(result, session_id)
        raise TypeError(
            f"Handler must return str, bytes or HTTPResponse, not {type(result).__name__}"
        )

    @staticmethod
    def _log_access(
        request: Optional[Request],
        response: HTTPResponse,
        state: DispatchState,
    ) -> None:
        if request is None:
            access_logger.info(f"<unparsed> -> {int(response.status)} ({state.value})")
            return

        access_logger.info(
            f"{request.method} request on '{request.resource}' from "
            f"{request.client_address[0] or '-'} -> {int(response.status)} "
            f"({state.value}, session={response.session_id})"
        )
