"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket.

This server handles exactly ONE request per connection:

    ┌──────────┐   recv() once   ┌────────────┐   sendall() once   ┌────────┐
    │   NEW    │ ──────────────► │ PROCESSING │ ─────────────────► │ CLOSED │
    └──────────┘                 └────────────┘                    └────────┘

There is no buffering loop. A single recv() of up to buffer_size bytes is
enough to hold a request line, and anything after the request line is
ignored anyway.

=============================================================================
TCP CLOSE SEQUENCE
=============================================================================

    Server                              Client
       │   FIN ──────────────────────────► │  shutdown(SHUT_WR)
       │ ◄───────────────────────── FIN   │  client reads EOF, closes
       │   (drain, then close())           │

Draining before close() matters: closing a socket that still has unread
data queued makes the kernel send RST, and the client may lose the
response it has not read yet.

The drain has a 0.5s timeout per recv() but no overall limit: a client that
keeps sending holds its thread until it stops. Client sockets have no
read or write timeout either.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
import uuid


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, tracked for logging."""
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    One client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port) tuple.
        id: Short random identifier for log lines.
        state: Current lifecycle state.
        created_at: When the connection was accepted.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 8192

    def __post_init__(self):
        # Client sockets block without a timeout: a silent peer holds its
        # thread until it sends or disconnects.
        self.socket.settimeout(None)

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    @property
    def age(self) -> float:
        """Seconds since the connection was accepted."""
        return time.time() - self.created_at

    def read_request(self) -> bytes:
        """
        Read once, up to buffer_size bytes.

        Returns:
            The bytes read. Empty if the peer closed the connection or the
            read failed; the caller should then close without responding.
        """
        self.state = ConnectionState.READING
        try:
            data = self.socket.recv(self.buffer_size)
        except OSError as e:
            logger.debug(f"[{self.id}] Read failed: {e}")
            return b""

        self.state = ConnectionState.PROCESSING
        return data

    def send_response(self, data: bytes) -> bool:
        """
        Write the whole response.

        sendall() loops until every byte is accepted by the kernel, so this
        is one logical write.

        Returns:
            True if the write succeeded, False if the connection is gone.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    def close(self):
        """Shut down the write side, drain, and release the socket."""
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # Includes socket.timeout

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
