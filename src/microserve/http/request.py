"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads an HTTP/1.1 request off a connection and turns it into an immutable
Request object.

=============================================================================
WHAT THE PARSER READS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST ON THE WIRE                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   POST /login?next=/home HTTP/1.1\r\n     ← request line             │
    │   Host: localhost:8080\r\n                ← header lines             │
    │   Cookie: session_id=3\r\n                ← session continuity       │
    │   Content-Length: 21\r\n                  ← body size                │
    │   \r\n                                    ← end of header block      │
    │   user=alice&pass=hunter                  ← exactly 21 body bytes    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The stream is consumed line by line until an empty line. Every line
(request line included) is kept verbatim in Request.header. Three things
are pulled out of the header block:

    1. METHOD and RESOURCE   first line, split on single spaces
    2. CONTENT-LENGTH        "Content-Length: <n>" (case-sensitive prefix)
    3. SESSION ID            first header line mentioning session_id

The resource is kept with its query string. Routing is exact string
equality on the whole resource, so "/a?x=1" and "/a" are different routes.

=============================================================================
FAILURE POLICY
=============================================================================

    Malformed request line        → HTTPParseError(400)
    Method other than GET/POST    → HTTPParseError(405)
    Body shorter than announced   → HTTPParseError(400)
    Body above max_body_size      → HTTPParseError(413)
    Header line above limit       → HTTPParseError(431)
    Malformed Content-Length      → treated as 0
    Malformed session id          → treated as "no session"

Values that only describe optional state (body size, session) fall back
to a default. Values the request cannot be routed without (method,
resource) fail the request. The dispatcher turns every HTTPParseError into
a 4xx response.
=============================================================================
"""

from dataclasses import dataclass, field
from io import BytesIO
from typing import BinaryIO, Dict, List, Optional, Tuple

from .errors import HTTPParseError
from .method import Method


CONTENT_LENGTH_PREFIX = "Content-Length: "
SESSION_MARKER = "session_id"


@dataclass(frozen=True)
class Request:
    """
    A parsed HTTP request.

    Created once per connection by RequestParser, handed to the route
    handler, then discarded.

    Attributes:
        method:         GET or POST
        resource:       Request target exactly as sent, query string included
        header:         Raw header block, one line per header, joined by "\\n"
        body:           UTF-8 decoded body, None when Content-Length is 0
        session:        Session id sent by the client, None when absent
        client_address: (ip, port) of the peer, for logging
    """

    method: Method
    resource: str
    header: str = ""
    body: Optional[str] = None
    session: Optional[int] = None
    client_address: Tuple[str, int] = field(default=("", 0), compare=False)

    @property
    def path(self) -> str:
        """The resource without its query string."""
        return self.resource.split("?", 1)[0]

    @property
    def query(self) -> str:
        """The raw query string ("" when there is none)."""
        _, _, query = self.resource.partition("?")
        return query

    @property
    def form(self) -> Dict[str, str]:
        """
        The body decoded as key=value&key=value pairs.

        Raises:
            HTTPParseError: If a pair has no "=".
        """
        if not self.body:
            return {}
        return from_forms(self.body)

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Look up a header value by name (case-insensitive).

        Scans the raw header block, skipping the request line. The first
        occurrence wins.
        """
        wanted = name.lower()
        for line in self.header.split("\n")[1:]:
            key, sep, value = line.partition(":")
            if sep and key.strip().lower() == wanted:
                return value.strip()
        return default


class RequestParser:
    """
    Parses requests from a binary stream.

    Usage:
        parser = RequestParser()
        with sock.makefile("rb") as stream:
            request = parser.parse(stream, address)

    The parser never reads past the announced body, so nothing belonging
    to the peer is consumed beyond this request.
    """

    def __init__(
        self,
        max_body_size: int = 10 * 1024 * 1024,
        max_line_size: int = 8192,
    ):
        """
        Args:
            max_body_size: Largest Content-Length accepted (413 above it).
            max_line_size: Longest single header line accepted (431 above it).
        """
        self.max_body_size = max_body_size
        self.max_line_size = max_line_size

    def parse(
        self,
        stream: BinaryIO,
        client_address: Tuple[str, int] = ("", 0),
    ) -> Request:
        """
        Read one request from the stream.

        Args:
            stream: Readable binary stream (socket file, BytesIO).
            client_address: Peer (ip, port), copied onto the Request.

        Returns:
            The parsed Request.

        Raises:
            HTTPParseError: On any malformed or truncated input, and on I/O
                            errors while reading.
        """
        try:
            lines = self._read_header_lines(stream)
            if not lines:
                raise HTTPParseError("Empty request")

            method, resource = self._parse_request_line(lines[0])
            content_length = self._content_length(lines)
            body = self._read_body(stream, content_length)
        except OSError as e:
            raise HTTPParseError(f"Failed to read request: {e}") from e

        return Request(
            method=method,
            resource=resource,
            header="\n".join(lines),
            body=body,
            session=extract_session_id(lines[1:]),
            client_address=client_address,
        )

    def _read_header_lines(self, stream: BinaryIO) -> List[str]:
        """Read lines until an empty line or EOF."""
        lines: List[str] = []
        while True:
            raw = stream.readline(self.max_line_size + 1)
            if len(raw) > self.max_line_size:
                raise HTTPParseError("Header line too long", status_code=431)

            line = raw.decode("utf-8", errors="replace").rstrip()
            if not line:
                # Blank separator, or EOF (readline returns b"")
                return lines
            lines.append(line)

    def _parse_request_line(self, line: str) -> Tuple[Method, str]:
        """
        Split "METHOD SP RESOURCE [SP VERSION]" on single spaces.

        The version token is not checked.
        """
        tokens = line.split(" ")
        if len(tokens) < 2 or not tokens[0] or not tokens[1]:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        return Method.from_string(tokens[0]), tokens[1]

    def _content_length(self, lines: List[str]) -> int:
        length = 0
        for line in lines:
            if line.startswith(CONTENT_LENGTH_PREFIX):
                length = _parse_unsigned(line[len(CONTENT_LENGTH_PREFIX):]) or 0

        if length > self.max_body_size:
            raise HTTPParseError(
                f"Request body too large: {length} bytes",
                status_code=413,
            )
        return length

    def _read_body(self, stream: BinaryIO, length: int) -> Optional[str]:
        if length == 0:
            return None

        data = stream.read(length)
        if data is None or len(data) < length:
            received = 0 if data is None else len(data)
            raise HTTPParseError(
                f"Incomplete body: expected {length} bytes, got {received}"
            )
        return data.decode("utf-8", errors="replace")


def extract_session_id(header_lines: List[str]) -> Optional[int]:
    """
    Find the session id in a list of header lines.

    The first line mentioning "session_id" is used; its value is whatever
    follows the next "=", up to a ";" or whitespace. Works for a plain
    "Cookie: session_id=7" as well as "Cookie: theme=dark; session_id=7".

    Returns None when no line mentions a session, or when the value is
    not a non-negative integer.
    """
    for line in header_lines:
        marker = line.find(SESSION_MARKER)
        if marker == -1:
            continue

        equals = line.find("=", marker)
        if equals == -1:
            return None

        value = line[equals + 1:].lstrip()
        for stop in (";", " ", "\t", ","):
            value = value.split(stop, 1)[0]
        return _parse_unsigned(value)
    return None


def _parse_unsigned(text: str) -> Optional[int]:
    text = text.strip()
    if text.isascii() and text.isdigit():
        return int(text)
    return None


def from_forms(body: str) -> Dict[str, str]:
    """
    Decode a form body: "key1=value1&key2=value2".

    Each pair is split on its first "=", so "a=b=c" gives {"a": "b=c"}.
    Values are kept verbatim (no percent-decoding). A repeated key keeps
    its last value.

    Example:
        >>> from_forms("user=alice&age=30")
        {'user': 'alice', 'age': '30'}

    Raises:
        HTTPParseError: If a pair contains no "=" (400).
    """
    if not body:
        return {}

    fields: Dict[str, str] = {}
    for pair in body.split("&"):
        key, sep, value = pair.partition("=")
        if not sep:
            raise HTTPParseError(f"Malformed form field: {pair!r}")
        fields[key] = value
    return fields


def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0),
    max_body_size: int = 10 * 1024 * 1024,
) -> Request:
    """
    Parse a request held entirely in memory.

    Convenience wrapper for tests and tools; the server parses straight
    from the socket stream instead.
    """
    parser = RequestParser(max_body_size=max_body_size)
    return parser.parse(BytesIO(data), client_address)
