"""
=============================================================================
MINIHTTPD - A minimal HTTP/1.1 server on raw sockets
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        MINIHTTPD ARCHITECTURE                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   SocketServer ──accept──► thread per connection                     │
    │                                 │                                    │
    │                                 ▼                                    │
    │                        HTTPServer.handle_connection                  │
    │                                 │                                    │
    │               read ─► parse ─► Router.dispatch ─► write ─► close     │
    │                                 │                                    │
    │                   ┌─────────────┴─────────────┐                      │
    │                   ▼                           ▼                      │
    │            built-in routes            StaticFileHandler              │
    │           (/, /about, /health)        (document root)                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttpd/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m minihttpd)
    ├── server.py            # HTTPServer and the connection handler
    ├── config.py            # ServerConfig dataclass
    ├── access_log.py        # One line per answered request
    ├── core/
    │   ├── socket_server.py # Accept loop, shutdown token, signals
    │   └── connection.py    # Client socket wrapper
    ├── http/
    │   ├── request.py       # Request line and query string parsing
    │   ├── response.py      # HTTPResponse and serialization
    │   ├── buffer.py        # Growable response buffer
    │   ├── router.py        # Fixed route table and dispatch
    │   ├── status_codes.py  # HTTP status enum
    │   └── mime_types.py    # Extension → Content-Type
    └── handlers/
        ├── static.py        # Static file serving
        └── pages.py         # Built-in pages and the route table

=============================================================================
QUICK START
=============================================================================

    from minihttpd import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=8080, document_root="public"))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
