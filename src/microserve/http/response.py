"""
=============================================================================
HTTP RESPONSE FORMATTER
=============================================================================

Turns a status, a body and an optional session id into response bytes.
This module performs no I/O.

=============================================================================
RESPONSE SHAPES
=============================================================================

    SUCCESS (handler returned a body)
    ─────────────────────────────────
        HTTP/1.1 200 OK\r\n
        Set-Cookie: session_id=4; HttpOnly\r\n     ← session echoed back
        Content-Length: 5\r\n                      ← computed from the body
        \r\n
        hello

    NOT FOUND (no route for the resource)
    ─────────────────────────────────────
        HTTP/1.1 404 NOT FOUND\r\n
        Content-Length: 18\r\n
        \r\n
        Resource not found

    REDIRECT (handler returned redirect(...))
    ─────────────────────────────────────────
        HTTP/1.1 302 Found\r\n
        Location: /login\r\n
        \r\n

Content-Length is ALWAYS computed from the encoded body here. Callers
never pass a length, so the header cannot disagree with the body, whether
the body is ASCII or multi-byte UTF-8.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from .status_codes import HTTPStatus


Body = Union[str, bytes]

NOT_FOUND_BODY = "Resource not found"
INTERNAL_ERROR_BODY = "Internal Server Error"


def encode_body(body: Body) -> bytes:
    """Encode a str body as UTF-8; bytes pass through unchanged."""
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body)


@dataclass
class HTTPResponse:
    """
    A response waiting to be written to the client.

    Handlers normally return a plain str/bytes body and let the dispatcher
    build this. They return an HTTPResponse directly only for the
    alternate response kinds, such as redirect().

    Attributes:
        status:     HTTP status (enum)
        headers:    Extra headers, written in insertion order
        body:       Encoded body bytes
        session_id: Session to echo back in Set-Cookie, None for no cookie
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    session_id: Optional[int] = None
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def content_length(self) -> int:
        return len(self.body)

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header. Returns self for chaining."""
        self.headers[name] = value
        return self

    def with_session(self, session_id: Optional[int]) -> "HTTPResponse":
        """Attach the session id to echo back. Returns self for chaining."""
        self.session_id = session_id
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize the response.

        =====================================================================
        HEADER ORDER
        =====================================================================

            1. Set-Cookie       only when a session id is attached
            2. extra headers    in insertion order (Location, ...)
            3. Content-Length   from len(body); omitted for a bodiless
                                redirect

        =====================================================================
        """
        lines = [self.status_line]

        if self.session_id is not None:
            lines.append(f"Set-Cookie: session_id={self.session_id}; HttpOnly")

        for name, value in self.headers.items():
            if name.lower() == "content-length":
                continue  # Always recomputed below
            lines.append(f"{name}: {value}")

        if self.body or not self.status.is_redirect:
            lines.append(f"Content-Length: {len(self.body)}")

        # Empty line separates headers from body
        lines.append("")
        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


# =============================================================================
# RESPONSE CONSTRUCTORS
# =============================================================================

def ok(body: Body = "", session_id: Optional[int] = None) -> HTTPResponse:
    """200 OK with the given body and, optionally, a session cookie."""
    return HTTPResponse(
        status=HTTPStatus.OK,
        body=encode_body(body),
        session_id=session_id,
    )


def format_content(body: Body, session_id: Optional[int] = None) -> bytes:
    """
    Serialize a success response in one step.

    Example:
        >>> format_content("hi", 3)
        b'HTTP/1.1 200 OK\\r\\nSet-Cookie: session_id=3; HttpOnly\\r\\nContent-Length: 2\\r\\n\\r\\nhi'
    """
    return ok(body, session_id).to_bytes()


def not_found() -> HTTPResponse:
    """The fixed 404 response. Never carries a session cookie."""
    return HTTPResponse(status=HTTPStatus.NOT_FOUND, body=NOT_FOUND_BODY.encode("utf-8"))


def redirect(location: str) -> HTTPResponse:
    """
    302 Found pointing at `location`.

    Return this from a handler instead of a body:

        @server.post("/logout")
        def logout(request, session):
            session.remove("user")
            return redirect("/")
    """
    return HTTPResponse(status=HTTPStatus.FOUND, headers={"Location": location})


def bad_request(message: str = "Bad Request") -> HTTPResponse:
    """400 for requests the parser rejected."""
    return HTTPResponse(status=HTTPStatus.BAD_REQUEST, body=encode_body(message))


def method_not_allowed() -> HTTPResponse:
    """405, with the Allow header listing the supported methods."""
    return HTTPResponse(
        status=HTTPStatus.METHOD_NOT_ALLOWED,
        headers={"Allow": "GET, POST"},
        body=b"Method Not Allowed",
    )


def internal_error() -> HTTPResponse:
    """500 for handler failures. The body never includes exception details."""
    return HTTPResponse(
        status=HTTPStatus.INTERNAL_SERVER_ERROR,
        body=INTERNAL_ERROR_BODY.encode("utf-8"),
    )


def error_response(status_code: int, message: str) -> HTTPResponse:
    """
    Map a parse failure status to a response.

    Unknown codes fall back to 400 so a client always receives a
    well-formed 4xx.
    """
    if status_code == HTTPStatus.METHOD_NOT_ALLOWED:
        return method_not_allowed()
    try:
        status = HTTPStatus(status_code)
    except ValueError:
        status = HTTPStatus.BAD_REQUEST
    if not status.is_error:
        status = HTTPStatus.BAD_REQUEST
    return HTTPResponse(status=status, body=encode_body(message))
