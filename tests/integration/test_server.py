"""
End-to-end tests over real sockets.

Each test talks to a server running in a background thread. Every
connection carries exactly one request; the server closes it after
responding, so the client reads until EOF.
"""

import re
import threading

from microserve import HTTPServer, ServerConfig


SESSION_COOKIE = re.compile(rb"Set-Cookie: session_id=(\d+); HttpOnly\r\n")


def split_response(raw: bytes):
    """Split raw response bytes into (status line, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("utf-8").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return lines[0], headers, body


def session_of(raw: bytes) -> int:
    match = SESSION_COOKIE.search(raw)
    assert match is not None, raw
    return int(match.group(1))


class TestSessions:
    """Session continuity across connections."""

    def test_first_request_gets_cookie(self, test_server):
        raw = test_server.request(b"GET /counter HTTP/1.1\r\nHost: test\r\n\r\n")

        status, headers, body = split_response(raw)
        assert status == "HTTP/1.1 200 OK"
        assert headers["Set-Cookie"] == "session_id=0; HttpOnly"
        assert body == b"count=1"

    def test_cookie_round_trip(self, test_server):
        first = test_server.request(b"GET /counter HTTP/1.1\r\n\r\n")
        sid = session_of(first)

        cookie = f"Cookie: session_id={sid}\r\n".encode()
        second = test_server.request(b"GET /counter HTTP/1.1\r\n" + cookie + b"\r\n")
        third = test_server.request(b"GET /counter HTTP/1.1\r\n" + cookie + b"\r\n")

        assert session_of(second) == sid
        assert split_response(third)[2] == b"count=3"

    def test_clients_do_not_share_sessions(self, test_server):
        a = test_server.request(b"GET /counter HTTP/1.1\r\n\r\n")
        b = test_server.request(b"GET /counter HTTP/1.1\r\n\r\n")

        assert session_of(a) != session_of(b)
        assert split_response(b)[2] == b"count=1"

    def test_unknown_cookie_gets_fresh_session(self, test_server):
        raw = test_server.request(b"GET /counter HTTP/1.1\r\nCookie: session_id=999\r\n\r\n")

        assert session_of(raw) == 0
        assert split_response(raw)[2] == b"count=1"


class TestResponses:
    """Response framing on the wire."""

    def test_not_found_exact(self, test_server):
        raw = test_server.request(b"GET /nowhere HTTP/1.1\r\n\r\n")

        assert raw == (
            b"HTTP/1.1 404 NOT FOUND\r\n"
            b"Content-Length: 18\r\n"
            b"\r\n"
            b"Resource not found"
        )

    def test_content_length_matches_multibyte_body(self, test_server):
        raw = test_server.request(b"GET /unicode HTTP/1.1\r\n\r\n")

        _, headers, body = split_response(raw)
        assert int(headers["Content-Length"]) == len(body)
        assert body.decode("utf-8") == "héllo wörld ✓"

    def test_post_body_echoed(self, test_server):
        body = "name=zoë".encode("utf-8")
        raw = test_server.request(
            b"POST /echo HTTP/1.1\r\n"
            + f"Content-Length: {len(body)}\r\n".encode()
            + b"\r\n"
            + body
        )

        assert split_response(raw)[2] == body

    def test_redirect(self, test_server):
        raw = test_server.request(b"GET /go HTTP/1.1\r\n\r\n")

        status, headers, body = split_response(raw)
        assert status == "HTTP/1.1 302 Found"
        assert headers["Location"] == "/counter"
        assert body == b""


class TestErrors:
    """Malformed requests and failing handlers."""

    def test_bad_request_line(self, test_server):
        raw = test_server.request(b"HELLO\r\n\r\n")
        assert raw.startswith(b"HTTP/1.1 400 Bad Request\r\n")

    def test_unsupported_method(self, test_server):
        raw = test_server.request(b"DELETE /counter HTTP/1.1\r\n\r\n")
        assert raw.startswith(b"HTTP/1.1 405 Method Not Allowed\r\n")

    def test_truncated_body(self, test_server):
        raw = test_server.request(
            b"POST /echo HTTP/1.1\r\nContent-Length: 100\r\n\r\nshort",
            half_close=True,
        )
        assert raw.startswith(b"HTTP/1.1 400 Bad Request\r\n")

    def test_handler_error(self, test_server):
        raw = test_server.request(b"GET /boom HTTP/1.1\r\n\r\n")

        status, _, body = split_response(raw)
        assert status == "HTTP/1.1 500 Internal Server Error"
        assert b"exploded" not in body

    def test_server_survives_errors(self, test_server):
        test_server.request(b"HELLO\r\n\r\n")
        test_server.request(b"GET /boom HTTP/1.1\r\n\r\n")

        raw = test_server.request(b"GET /counter HTTP/1.1\r\n\r\n")
        assert raw.startswith(b"HTTP/1.1 200 OK\r\n")

    def test_client_disconnects_without_sending(self, test_server):
        test_server.request(b"", half_close=True)

        raw = test_server.request(b"GET /counter HTTP/1.1\r\n\r\n")
        assert raw.startswith(b"HTTP/1.1 200 OK\r\n")


class TestLifecycle:
    """Starting and stopping."""

    def test_run_on_explicit_port(self, free_port):
        server = HTTPServer(ServerConfig(log_level="WARNING"))
        thread = threading.Thread(target=server.run, kwargs={"port": free_port}, daemon=True)
        thread.start()

        try:
            assert server.wait_until_ready(timeout=5.0)
            assert server.address[1] == free_port
            assert server.is_running
        finally:
            server.shutdown()
            thread.join(timeout=5.0)

        assert not thread.is_alive()
        assert not server.is_running

    def test_wait_for_shutdown(self, config):
        server = HTTPServer(config)
        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        assert server.wait_until_ready(timeout=5.0)

        # Still serving: the wait times out
        assert not server.wait_for_shutdown(timeout=0.1)

        server.shutdown()

        assert server.wait_for_shutdown(timeout=5.0)
        assert not server.is_running
        thread.join(timeout=5.0)

    def test_shutdown_is_idempotent(self, test_server):
        test_server.server.shutdown()
        test_server.server.shutdown()
