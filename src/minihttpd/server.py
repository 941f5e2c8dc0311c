"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together and implements the per-connection handler.

=============================================================================
REQUEST FLOW
=============================================================================

    1. SocketServer accepts a TCP connection
       └── spawns a daemon thread running handle_connection()

    2. READ
       └── One recv() of up to buffer_size bytes
       └── Nothing read → close, no response

    3. PARSE
       └── Request line → method, path, query string
       └── Malformed → 400
       └── Method other than GET → 405

    4. DISPATCH
       └── Router: exact route match, else static file lookup

    5. SERIALIZE
       └── HTTPResponse → ResponseBuffer
       └── Buffer failure → close, no partial write

    6. WRITE + CLOSE
       └── One sendall(), buffer freed, socket closed (always)

Every failure in steps 2-6 stays inside that connection's thread.

=============================================================================
"""

import logging
import time
from typing import Iterable, Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, ShutdownToken, Connection
from .http import (
    HTTPRequest, HTTPParseError, HTTPResponse, ResponseBufferError,
    Router, Route,
    parse_request_line, parse_query_string,
    bad_request, method_not_allowed, internal_error,
)
from .handlers import StaticFileHandler, BUILTIN_ROUTES
from .access_log import log_request


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Minimal HTTP/1.1 server: built-in routes plus static files.

    Usage:
        server = HTTPServer(ServerConfig(port=8080, document_root="public"))
        server.run()  # Blocks until SIGINT/SIGTERM or server.shutdown()
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        routes: Iterable[Route] = BUILTIN_ROUTES,
        token: Optional[ShutdownToken] = None,
    ):
        """
        Args:
            config: Server configuration. Validated immediately.
            routes: Route table, fixed for the server's lifetime.
            token: Shutdown token; lets the owner stop the server.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self.token = token or ShutdownToken()
        self.static = StaticFileHandler(self.config.document_root, self.config.index_file)
        self.router = Router(routes, fallback=self.static.serve)

        self._socket_server = SocketServer(self.config, self.token)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @property
    def address(self) -> Tuple[str, int]:
        return self._socket_server.address

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def run(self):
        """
        Start the server (blocking).

        Raises:
            OSError: If the listening socket could not be created, bound or
                     put into listening mode.
        """
        self._setup_logging()

        logger.info(f"Starting {self.config.server_name} on {self.config.host}:{self.config.port}")
        logger.info(f"Document root: {self.config.document_root}")
        for route in self.router.routes:
            logger.info(f"  GET {route.path} -> {route.handler.__name__}")

        try:
            self._socket_server.start(self.handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self.token.cancel()
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. In-flight requests finish normally."""
        self.token.cancel()

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("minihttpd").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def handle_connection(self, conn: Connection):
        """
        Serve exactly one request on `conn`, then close it.

        Runs on the connection's own thread. Never raises; the connection is
        closed on every path.
        """
        with conn:
            started = time.perf_counter()

            raw = conn.read_request()
            if not raw:
                logger.debug(f"[{conn.id}] Peer closed before sending a request")
                return

            response, request = self.handle_request(raw)

            try:
                buf = response.to_buffer()
            except (ResponseBufferError, MemoryError) as e:
                logger.error(f"[{conn.id}] Could not assemble response: {e}")
                return

            try:
                conn.send_response(buf.getvalue())
            finally:
                buf.free()

            log_request(
                client_ip=conn.client_ip,
                method=request.method if request else "",
                path=request.path if request else "",
                status_code=int(response.status),
                content_length=response.content_length,
                duration_ms=(time.perf_counter() - started) * 1000,
            )

    def handle_request(self, raw: bytes) -> Tuple[HTTPResponse, Optional[HTTPRequest]]:
        """
        Turn raw request bytes into a response.

        Returns:
            (response, request). request is None when the request line could
            not be parsed.
        """
        try:
            method, path, query_string = parse_request_line(raw)
        except HTTPParseError as e:
            logger.debug(f"Bad request line: {e}")
            return bad_request(), None

        if method != "GET":
            return method_not_allowed(), HTTPRequest(method=method, path=path)

        request = HTTPRequest(
            method=method,
            path=path,
            query=tuple(parse_query_string(query_string)),
            query_string=query_string,
        )

        try:
            response = self.router.dispatch(request)
        except Exception as e:
            logger.exception(f"Handler error for {path}: {e}")
            response = internal_error()

        return response, request


def create_app(config: Optional[ServerConfig] = None) -> HTTPServer:
    """Factory for a server with the built-in routes."""
    return HTTPServer(config)
