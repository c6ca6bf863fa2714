"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

Translates raw bytes from TCP into Request objects and response objects
back into bytes. Nothing in this package touches a socket.

=============================================================================
MODULE COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ WIRE PARSER (request.py)                                            │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   b"GET /counter HTTP/1.1\r\nCookie: session_id=2\r\n\r\n"  │
    │ Output:  Request(method=GET, resource="/counter", session=2)        │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ RESPONSE FORMATTER (response.py)                                    │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   ok("hi", session_id=2)                                     │
    │ Output:  b"HTTP/1.1 200 OK\r\nSet-Cookie: session_id=2; HttpOnly   │
    │            \r\nContent-Length: 2\r\n\r\nhi"                          │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ ROUTE TABLE (router.py)                                             │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   "/counter"                                                 │
    │ Output:  Route("/counter", counter) or None                         │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .errors import HTTPParseError
from .method import Method
from .request import Request, RequestParser, extract_session_id, from_forms, parse_request
from .response import (
    HTTPResponse,
    # Convenience functions for common responses
    ok,                  # 200 OK
    format_content,      # 200 OK, serialized
    redirect,            # 302 Found
    bad_request,         # 400 Bad Request
    not_found,           # 404 NOT FOUND
    method_not_allowed,  # 405 Method Not Allowed
    internal_error,      # 500 Internal Server Error
    error_response,      # 4xx from a parse error code
)
from .router import Handler, Route, RouteTable
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPParseError",
    "Method",
    "Request",
    "RequestParser",
    "extract_session_id",
    "from_forms",
    "parse_request",

    # Response formatting
    "HTTPResponse",
    "ok",
    "format_content",
    "redirect",
    "bad_request",
    "not_found",
    "method_not_allowed",
    "internal_error",
    "error_response",

    # Routing
    "Handler",
    "Route",
    "RouteTable",

    # Status codes
    "HTTPStatus",
]
