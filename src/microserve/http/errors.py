"""
Exceptions raised while reading HTTP input.
"""


class HTTPParseError(Exception):
    """
    Raised when a request cannot be turned into a Request.

    This exception carries an HTTP status code that should be returned
    to the client. Different parse errors map to different codes:

        400 Bad Request             - Malformed start line, truncated body,
                                      malformed form body
        405 Method Not Allowed      - Method other than GET or POST
        413 Payload Too Large       - Content-Length above the configured limit
        431 Header Fields Too Large - A single header line is too long

    The dispatcher catches this and writes the matching 4xx response, so a
    malformed request never takes the accept loop down with it.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code  # HTTP status to return
