"""
=============================================================================
CORE - Sockets and connections
=============================================================================

    socket_server.py   Listening socket, accept loop, shutdown token
    connection.py      One accepted client socket

=============================================================================
"""

from .socket_server import SocketServer, ShutdownToken
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",
    "ShutdownToken",
    "Connection",
    "ConnectionState",
]
