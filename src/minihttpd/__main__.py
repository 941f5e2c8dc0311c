"""
=============================================================================
CLI ENTRY POINT
=============================================================================

    # Defaults (0.0.0.0:8080, document root ./public)
    python -m minihttpd

    # Custom port
    python -m minihttpd 3000

    # Another document root, verbose logging
    python -m minihttpd 3000 --root ./site --log-level DEBUG

Defaults come from the environment (see ServerConfig.from_env), then
command-line arguments override them.

Exit status:
    0   Stopped by SIGINT/SIGTERM
    1   Listening socket could not be set up
    2   Invalid arguments

=============================================================================
"""

import argparse
import sys

from . import __version__
from .server import HTTPServer
from .config import ServerConfig, LOG_LEVELS


def port_number(value: str) -> int:
    """argparse type: an integer port in 1-65535."""
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}")

    if not 1 <= port <= 65535:
        raise argparse.ArgumentTypeError(f"port must be 1-65535, got {port}")
    return port


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minihttpd",
        description="Minimal HTTP/1.1 server: built-in pages plus static files",
    )

    parser.add_argument(
        "port",
        nargs="?",
        type=port_number,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})",
    )
    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Address to bind (default: {defaults.host})",
    )
    parser.add_argument(
        "--root", "-r",
        default=defaults.document_root,
        help=f"Document root for static files (default: {defaults.document_root})",
    )
    parser.add_argument(
        "--index",
        default=defaults.index_file,
        help=f"File served for directory requests (default: {defaults.index_file})",
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        type=str.upper,
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level.upper()})",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttpd {__version__}",
    )
    return parser


def main(argv=None) -> int:
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid environment: {e}", file=sys.stderr)
        return 2

    args = build_parser(defaults).parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        document_root=args.root,
        index_file=args.index,
        log_level=args.log_level,
    )

    try:
        server = HTTPServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
