"""
HTTP methods accepted by the server.

Only GET and POST are supported. Any other token on the request line is
rejected by the parser with 405 Method Not Allowed.
"""

from enum import Enum

from .errors import HTTPParseError


class Method(Enum):
    """Supported HTTP request methods."""

    GET = "GET"
    POST = "POST"

    @classmethod
    def from_string(cls, token: str) -> "Method":
        """
        Convert a request-line token to a Method.

        The match is exact and case-sensitive: "get" is not GET.

        Raises:
            HTTPParseError: If the token is not a supported method (405).
        """
        try:
            return cls(token)
        except ValueError:
            raise HTTPParseError(
                f"Unsupported method: {token!r}",
                status_code=405,
            ) from None

    def __str__(self) -> str:
        return self.value
