"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m microserve --port 3000                          │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTP_PORT=3000 python -m microserve                       │
    │                                                                      │
    │   3. Defaults defined in ServerConfig                               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    Development:
        ServerConfig(port=8080, log_level="DEBUG")

    Embedded in a test, on a free port:
        ServerConfig(port=0, timeout=5.0)
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """
    The port number to listen on. 0 lets the OS pick a free port; read it
    back from HTTPServer.address once the server is running.
    """

    backlog: int = 128
    """
    Maximum number of queued connections. Connections are served one at a
    time, so everyone waiting behind a slow request sits in this queue.
    """

    timeout: Optional[float] = None
    """
    Client socket timeout in seconds.
    None = blocking: a stalled client blocks the server until it sends
    or disconnects. Set a value to bound how long one client can hold
    the accept loop.
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST LIMITS
    # ─────────────────────────────────────────────────────────────────────

    max_body_size: int = 10 * 1024 * 1024  # 10 MB
    """
    Largest Content-Length accepted. Larger requests get 413 without the
    body being read.
    """

    max_line_size: int = 8192
    """
    Longest single header line accepted. Longer lines get 431.
    """

    # ─────────────────────────────────────────────────────────────────────
    # STATIC FILES
    # ─────────────────────────────────────────────────────────────────────

    static_dir: Optional[str] = None
    """
    Directory registered as static content at startup. Every file under it
    is served at /<dirname>/<relative path>.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        HTTP_HOST           Server host (default: 127.0.0.1)
        HTTP_PORT           Server port (default: 8080)
        HTTP_TIMEOUT        Client socket timeout in seconds (default: none)
        HTTP_MAX_BODY_SIZE  Largest accepted body in bytes (default: 10 MB)
        HTTP_STATIC_DIR     Static files directory (default: none)
        HTTP_LOG_LEVEL      Logging level (default: INFO)
        """
        timeout = os.getenv("HTTP_TIMEOUT")
        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "8080")),
            timeout=float(timeout) if timeout else None,
            max_body_size=int(os.getenv("HTTP_MAX_BODY_SIZE", str(10 * 1024 * 1024))),
            static_dir=os.getenv("HTTP_STATIC_DIR"),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called by HTTPServer at construction time, so a bad value fails at
        startup instead of on the first request.

        Raises:
            ValueError: On the first invalid value found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0 or None")

        if self.max_body_size < 0:
            raise ValueError("max_body_size must be >= 0")

        if self.max_line_size < 64:
            raise ValueError("max_line_size must be >= 64")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log_level: {self.log_level}")
