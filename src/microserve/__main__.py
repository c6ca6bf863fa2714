"""
=============================================================================
MICROSERVE CLI ENTRY POINT
=============================================================================

Runs a small demo application on top of the server.

=============================================================================
USAGE
=============================================================================

    # Run with defaults (localhost:8080)
    python -m microserve

    # Custom port
    python -m microserve --port 3000

    # Listen on all interfaces (for containers)
    python -m microserve --host 0.0.0.0

    # Serve static files under /<dirname>/...
    python -m microserve --static ./public

=============================================================================
DEMO ROUTES
=============================================================================

    /          visit counter kept in the session
    /login     POST user=<name> stores a name in the session, then
               redirects to /
    /logout    forgets the name and redirects to /

Try it with curl, keeping the cookie between calls:

    curl -c jar -b jar localhost:8080/
    curl -c jar -b jar -d "user=alice" localhost:8080/login
    curl -c jar -b jar localhost:8080/

=============================================================================
"""

import argparse
import html
import sys

from . import __version__
from .config import ServerConfig
from .handlers.template import substitute
from .http.response import redirect
from .server import HTTPServer


INDEX_PAGE = """<!DOCTYPE html>
<html>
<head><title>microserve</title></head>
<body>
    <h1>Hello, $user!</h1>
    <p>You have visited this page $visits times.</p>
    <form method="post" action="/login">
        <input name="user" placeholder="Your name">
        <button>Log in</button>
    </form>
    <p><a href="/logout">Log out</a></p>
</body>
</html>
"""


def build_demo(server: HTTPServer) -> None:
    """Register the demo routes on `server`."""

    @server.get("/")
    def index(request, session):
        visits = (session.get("visits", int) or 0) + 1
        session.set("visits", visits)
        user = session.get("user", str) or "stranger"
        return substitute(INDEX_PAGE, user=html.escape(user), visits=visits)

    @server.post("/login")
    def login(request, session):
        user = request.form.get("user")
        if user:
            session.set("user", user)
        return redirect("/")

    @server.get("/logout")
    def logout(request, session):
        session.remove("user")
        return redirect("/")


def main():
    """
    Main CLI entry point.

    Arguments:
    - --host, -H: Server host
    - --port, -p: Server port
    - --static, -s: Static files directory
    - --timeout, -t: Client socket timeout
    - --log-level, -l: Logging verbosity
    - --version, -v: Show version
    """
    parser = argparse.ArgumentParser(
        description="Minimal embeddable HTTP/1.1 server with sessions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m microserve                      # Run with defaults
  python -m microserve --port 3000          # Custom port
  python -m microserve --host 0.0.0.0       # Listen on all interfaces
  python -m microserve --static ./public    # Serve static files
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1, use 0.0.0.0 for containers)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=8080,
        help="Port to listen on (default: 8080)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Client socket timeout in seconds (default: wait forever)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # FEATURE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--static", "-s",
        type=str,
        default=None,
        help="Directory to serve static files from (e.g., ./public)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"microserve {__version__}"
    )

    args = parser.parse_args()

    config = ServerConfig(
        host=args.host,
        port=args.port,
        timeout=args.timeout,
        static_dir=args.static,
        log_level=args.log_level,
    )

    try:
        server = HTTPServer(config)
        build_demo(server)
        server.run()
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
