"""
=============================================================================
CORE NETWORKING
=============================================================================

The transport layer under the HTTP code:

    SocketServer   binds, listens, accepts; hands each connection to a
                   callback and waits for it to finish
    Connection     one accepted client socket with buffered reads,
                   sendall() writes and an idempotent close()

Connections are served strictly one after another. A slow client delays
everyone queued behind it; ServerConfig.timeout bounds how long.
=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # TCP listener and accept loop
    "Connection",       # Wrapper for a client socket
    "ConnectionState",  # Connection lifecycle states
]
