"""
=============================================================================
SOCKET SERVER
=============================================================================

Binds the listening socket and runs the accept loop.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      ACCEPT LOOP (sequential)                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   socket() → bind() → listen()                                       │
    │        │                                                             │
    │        ▼                                                             │
    │   while running:                                                     │
    │       accept()                 wait up to 1s, then re-check flag     │
    │       Connection(...)          wrap the client socket                │
    │       connection_handler(conn) runs TO COMPLETION before the next    │
    │                                accept()                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Connections are served strictly one at a time in acceptance order. While
a handler runs, further clients wait in the kernel's listen backlog. A
slow client or a slow handler therefore delays everyone behind it.
=============================================================================
"""

import logging
import signal
import socket
import threading
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


ConnectionHandler = Callable[[Connection], None]


class SocketServer:
    """
    Low-level TCP server.

    Usage:
        def handle_connection(conn: Connection):
            with conn:
                ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown()
    """

    # How often the accept loop wakes up to check for shutdown
    ACCEPT_TICK = 1.0

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Server configuration (host, port, backlog, timeout).

        The socket is not created until start().
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set once the socket is listening; cleared again on cleanup
        self._ready_event = threading.Event()
        self._shutdown_event = threading.Event()
        self._served = 0

        self._saved_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (host, port).

        With port=0 in the config, the OS-assigned port is reported once
        the server is listening.
        """
        if self._socket is not None:
            host, port = self._socket.getsockname()[:2]
            return (host, port)
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # SO_REUSEADDR: restart without waiting out TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # TCP_NODELAY: small responses go out immediately
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        sock.settimeout(self.ACCEPT_TICK)
        return sock

    def _setup_signals(self):
        """
        Install SIGTERM/SIGINT handlers that stop the accept loop.

        Python only allows this from the main thread. When the server is
        embedded and started from another thread, the host program keeps
        its own handlers and calls shutdown() itself.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"{signal_name} received, stopping")
            self.shutdown()

        self._saved_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._saved_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._saved_handlers.items():
            signal.signal(sig, handler)
        self._saved_handlers.clear()

    def start(self, connection_handler: ConnectionHandler):
        """
        Bind, listen and accept connections until shutdown().

        This method BLOCKS.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)

        self._running = True
        self._shutdown_event.clear()
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: ConnectionHandler):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue  # Re-check the running flag
            except OSError as e:
                if self._running:
                    logger.error(f"accept() failed, leaving loop: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                timeout=self.config.timeout,
            )

            # Runs to completion before the next accept()
            connection_handler(conn)
            self._served += 1

    def shutdown(self):
        """
        Stop the accept loop.

        Callable from a signal handler or another thread. The loop exits
        within ACCEPT_TICK seconds, after the connection in progress (if
        any) is finished. Idempotent.
        """
        if self._running:
            logger.info("Stopping accept loop")
        self._running = False

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._running = False
        self._ready_event.clear()
        self._shutdown_event.set()
        logger.info(f"Listener closed after {self._served} connections")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the socket is listening.

        Useful when start() runs in a background thread.

        Returns:
            True if listening, False on timeout.
        """
        return self._ready_event.wait(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the accept loop has exited and the listener is closed.

        Returns:
            True once stopped, False on timeout.
        """
        return self._shutdown_event.wait(timeout)
