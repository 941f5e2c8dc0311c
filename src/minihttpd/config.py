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
    │      └── python -m minihttpd 3000 --root ./site                     │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTP_PORT=3000 python -m minihttpd                         │
    │                                                                      │
    │   3. Defaults in ServerConfig                                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    Development:
        ServerConfig(host="127.0.0.1", port=8080, log_level="DEBUG")

    Production:
        ServerConfig(port=80, document_root="/var/www/html")
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """Address to bind. Defaults to all interfaces."""

    port: int = 8080
    """TCP port, 1-65535."""

    backlog: int = 128
    """Maximum number of queued connections passed to listen()."""

    buffer_size: int = 8192
    """Bytes read from a client in the single recv() per connection."""

    accept_poll_interval: float = 1.0
    """
    Seconds accept() waits before re-checking the shutdown token.
    Client sockets never get a timeout.
    """

    # ─────────────────────────────────────────────────────────────────────
    # STATIC FILES
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = "public"
    """Directory static files are served from."""

    index_file: str = "index.html"
    """File served when a request path names a directory."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    server_name: str = "minihttpd/1.0"
    """Name shown in the startup log line."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

            HTTP_HOST       Bind address       (default: 0.0.0.0)
            HTTP_PORT       Port               (default: 8080)
            HTTP_ROOT       Document root      (default: public)
            HTTP_INDEX      Index file name    (default: index.html)
            HTTP_LOG_LEVEL  Logging level      (default: INFO)

        Raises:
            ValueError: If HTTP_PORT is not an integer.
        """
        return cls(
            host=os.getenv("HTTP_HOST", "0.0.0.0"),
            port=int(os.getenv("HTTP_PORT", "8080")),
            document_root=os.getenv("HTTP_ROOT", "public"),
            index_file=os.getenv("HTTP_INDEX", "index.html"),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values at startup.

        Raises:
            ValueError: On the first invalid value.
        """
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 1-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.accept_poll_interval <= 0:
            raise ValueError("accept_poll_interval must be > 0")

        if not self.index_file or "/" in self.index_file:
            raise ValueError(f"Invalid index_file: {self.index_file!r}")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. "
                f"Must be one of {', '.join(LOG_LEVELS)}."
            )
