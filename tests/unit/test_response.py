"""
Unit tests for HTTP response formatting.
"""

import pytest

from microserve.http.response import (
    HTTPResponse,
    bad_request,
    encode_body,
    error_response,
    format_content,
    internal_error,
    method_not_allowed,
    not_found,
    ok,
    redirect,
)
from microserve.http.status_codes import HTTPStatus


class TestFormatContent:
    """Success responses."""

    def test_exact_bytes(self):
        assert format_content("hello", 4) == (
            b"HTTP/1.1 200 OK\r\n"
            b"Set-Cookie: session_id=4; HttpOnly\r\n"
            b"Content-Length: 5\r\n"
            b"\r\n"
            b"hello"
        )

    def test_content_length_counts_bytes(self):
        body = "héllo ✓"
        data = format_content(body, 0)

        assert f"Content-Length: {len(body.encode('utf-8'))}".encode() in data
        assert data.endswith(body.encode("utf-8"))

    def test_empty_body(self):
        data = format_content("", 1)

        assert b"Content-Length: 0\r\n\r\n" in data
        assert data.endswith(b"\r\n\r\n")

    def test_bytes_body_passes_through(self):
        data = format_content(b"\x00\xff", 2)
        assert data.endswith(b"Content-Length: 2\r\n\r\n\x00\xff")

    def test_without_session(self):
        data = ok("hi").to_bytes()

        assert b"Set-Cookie" not in data
        assert data == b"HTTP/1.1 200 OK\r\nContent-Length: 2\r\n\r\nhi"


class TestNotFound:
    """The fixed 404."""

    def test_exact_bytes(self):
        assert not_found().to_bytes() == (
            b"HTTP/1.1 404 NOT FOUND\r\n"
            b"Content-Length: 18\r\n"
            b"\r\n"
            b"Resource not found"
        )

    def test_length_matches_body(self):
        response = not_found()
        assert response.content_length == len(b"Resource not found")

    def test_no_session_cookie(self):
        assert b"Set-Cookie" not in not_found().to_bytes()


class TestRedirect:
    """302 responses."""

    def test_redirect(self):
        data = redirect("/login").to_bytes()

        assert data == b"HTTP/1.1 302 Found\r\nLocation: /login\r\n\r\n"

    def test_redirect_with_session(self):
        data = redirect("/").with_session(5).to_bytes()

        assert data == (
            b"HTTP/1.1 302 Found\r\n"
            b"Set-Cookie: session_id=5; HttpOnly\r\n"
            b"Location: /\r\n"
            b"\r\n"
        )


class TestErrorResponses:
    """4xx/5xx helpers."""

    def test_bad_request(self):
        response = bad_request("Invalid request line")

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.body == b"Invalid request line"

    def test_method_not_allowed(self):
        data = method_not_allowed().to_bytes()

        assert data.startswith(b"HTTP/1.1 405 Method Not Allowed\r\n")
        assert b"Allow: GET, POST\r\n" in data

    def test_internal_error_hides_details(self):
        response = internal_error()

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.body == b"Internal Server Error"

    @pytest.mark.parametrize("code,expected", [
        (400, HTTPStatus.BAD_REQUEST),
        (405, HTTPStatus.METHOD_NOT_ALLOWED),
        (413, HTTPStatus.PAYLOAD_TOO_LARGE),
        (431, HTTPStatus.REQUEST_HEADER_FIELDS_TOO_LARGE),
        (418, HTTPStatus.BAD_REQUEST),   # Unknown code
        (200, HTTPStatus.BAD_REQUEST),   # Not an error
    ])
    def test_error_response_status(self, code, expected):
        assert error_response(code, "nope").status == expected


class TestHTTPResponse:
    """Tests for HTTPResponse."""

    def test_status_line(self):
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"

    def test_content_length_header_always_recomputed(self):
        response = ok("abc")
        response.set_header("Content-Length", "999")

        data = response.to_bytes()
        assert b"Content-Length: 999" not in data
        assert b"Content-Length: 3\r\n" in data

    def test_extra_headers_in_order(self):
        response = ok("x").set_header("X-One", "1").set_header("X-Two", "2")
        data = response.to_bytes()

        assert data.index(b"X-One") < data.index(b"X-Two") < data.index(b"Content-Length")

    def test_encode_body(self):
        assert encode_body("é") == b"\xc3\xa9"
        assert encode_body(b"raw") == b"raw"
        assert encode_body(bytearray(b"buf")) == b"buf"


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.NOT_FOUND.phrase == "NOT FOUND"
        assert HTTPStatus.FOUND.phrase == "Found"

    def test_categories(self):
        assert HTTPStatus.OK.is_success
        assert HTTPStatus.FOUND.is_redirect
        assert HTTPStatus.NOT_FOUND.is_error
        assert HTTPStatus.INTERNAL_SERVER_ERROR.is_error
        assert not HTTPStatus.OK.is_error
