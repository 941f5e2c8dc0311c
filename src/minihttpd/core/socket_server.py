"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket, accepts connections, and gives each one its own
thread.

=============================================================================
STATE MACHINE
=============================================================================

    ┌───────────┐  accept()   ┌──────────────────┐
    │ Listening │ ──────────► │ spawn thread for │
    │           │ ◄────────── │ the connection   │
    └─────┬─────┘             └──────────────────┘
          │
          │ shutdown token cancelled
          │ (listening socket closed, next accept() fails)
          ▼
    ┌───────────┐
    │  Stopped  │
    └───────────┘

Connection threads are DETACHED: daemon threads that nobody joins or
counts. A crashing handler affects only its own connection, and in-flight
handlers keep running after the acceptor stops.

=============================================================================
SHUTDOWN TOKEN
=============================================================================

Shutdown is requested through a ShutdownToken passed in by the owner,
rather than a global flag flipped by a signal handler:

    token = ShutdownToken()
    server = SocketServer(config, token)

    # from a signal handler, another thread, or a test:
    token.cancel()

cancel() records the request and closes the listening socket the token is
attached to. The accept loop checks the token at the top of every
iteration; the listening socket also has a short timeout so the check runs
even when no connection arrives.

=============================================================================
SIGNALS
=============================================================================

SIGINT (2):   Ctrl+C in a terminal
SIGTERM (15): docker stop, systemd stop, kill <pid>
SIGPIPE:      Ignored, so writing to a peer that already closed raises
              BrokenPipeError in that thread instead of killing the process.

Signal handlers can only be installed from the main thread. When the server
runs on another thread (tests, embedding) it skips them; the owner cancels
the token directly.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class ShutdownToken:
    """
    Cancellation token shared by the acceptor and whoever stops it.

    Safe to cancel from any thread or from a signal handler, any number of
    times.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.RLock()  # re-entrant: cancel() may run in a signal handler
        self._socket: Optional[socket.socket] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def attach(self, sock: socket.socket) -> None:
        """Register the listening socket to close on cancel()."""
        with self._lock:
            self._socket = sock
        if self.cancelled:
            self._close_socket()

    def cancel(self) -> None:
        """Request shutdown and close the attached listening socket."""
        self._event.set()
        self._close_socket()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled. Returns False on timeout."""
        return self._event.wait(timeout)

    def _close_socket(self) -> None:
        with self._lock:
            sock, self._socket = self._socket, None

        if sock is None:
            return

        # shutdown() wakes a thread blocked in accept() on Linux; close()
        # alone does not.
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        try:
            sock.close()
        except OSError:
            pass


class SocketServer:
    """
    Low-level TCP acceptor.

    Usage:
        def handle(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle)  # Blocks until the token is cancelled
    """

    def __init__(self, config: ServerConfig, token: Optional[ShutdownToken] = None):
        """
        Args:
            config: Host, port, backlog, buffer size and poll interval.
            token: Shutdown token. A fresh one is created if omitted.
        """
        self.config = config
        self.token = token or ShutdownToken()

        self._socket: Optional[socket.socket] = None
        self._address: Tuple[str, int] = (config.host, config.port)
        self._ready = threading.Event()
        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """The bound (host, port). Valid once the server is ready."""
        return self._address

    @property
    def is_running(self) -> bool:
        return self._ready.is_set() and not self.token.cancelled

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. Returns False on timeout."""
        return self._ready.wait(timeout)

    def _create_socket(self) -> socket.socket:
        """
        Create, configure, bind and start listening.

        Raises:
            OSError: socket(), setsockopt(), bind() or listen() failed.
                     These are fatal at startup.
        """
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        except OSError as e:
            logger.error(f"Failed to create socket: {e}")
            raise

        try:
            # SO_REUSEADDR: rebind immediately after a restart instead of
            # waiting out TIME_WAIT.
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        except OSError as e:
            logger.error(f"Failed to set SO_REUSEADDR: {e}")
            sock.close()
            raise

        try:
            sock.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            sock.close()
            raise

        try:
            sock.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Failed to listen: {e}")
            sock.close()
            raise

        # Accepted sockets do not inherit this; Connection clears it anyway.
        sock.settimeout(self.config.accept_poll_interval)
        return sock

    def _setup_signals(self):
        """Install SIGINT/SIGTERM handlers and ignore SIGPIPE (main thread only)."""
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on main thread, skipping signal handlers")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, shutting down...")
            self.token.cancel()

        for sig in (signal.SIGINT, signal.SIGTERM):
            self._original_handlers[sig] = signal.signal(sig, shutdown_handler)

        if hasattr(signal, "SIGPIPE"):
            self._original_handlers[signal.SIGPIPE] = signal.signal(signal.SIGPIPE, signal.SIG_IGN)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Listen and run the accept loop until the token is cancelled.

        Args:
            connection_handler: Run on a new daemon thread for every
                                accepted connection.

        Raises:
            OSError: If the listening socket could not be set up.
        """
        self._socket = self._create_socket()
        self._address = self._socket.getsockname()[:2]
        self.token.attach(self._socket)
        self._setup_signals()

        logger.info(f"Server listening on {self._address[0]}:{self._address[1]}")
        self._ready.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        sock = self._socket

        while not self.token.cancelled:
            try:
                client_socket, client_address = sock.accept()
            except socket.timeout:
                continue  # Poll interval elapsed, re-check the token
            except OSError as e:
                if self.token.cancelled or sock.fileno() == -1:
                    break  # Listening socket closed: this is the shutdown
                # EINTR, ECONNABORTED, EMFILE... keep serving
                logger.warning(f"Accept failed, retrying: {e}")
                continue

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
            )
            logger.debug(f"[{conn.id}] Accepted connection from {client_address[0]}:{client_address[1]}")

            self._spawn(connection_handler, conn)

    def _spawn(self, connection_handler: Callable[[Connection], None], conn: Connection):
        thread = threading.Thread(
            target=connection_handler,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        try:
            thread.start()
        except RuntimeError as e:
            # Could not get a thread for this connection; drop it
            logger.error(f"[{conn.id}] Failed to start handler thread: {e}")
            conn.close()

    def shutdown(self):
        """Stop accepting connections. Idempotent."""
        self.token.cancel()

    def _cleanup(self):
        self._restore_signals()
        self.token.cancel()
        self._socket = None
        self._ready.clear()
        logger.info("Socket server stopped")
