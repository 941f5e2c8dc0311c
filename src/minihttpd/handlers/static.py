"""
=============================================================================
STATIC FILE SERVING
=============================================================================

Serves files from a document root for any GET that no built-in route
claims.

=============================================================================
PATH TRAVERSAL
=============================================================================

The most common attack on a static file server is path traversal:

    GET /../../../etc/passwd HTTP/1.1

If we naively join this with the document root, we'd serve
/etc/passwd! Any path that does not start with "/" or that contains ".."
ANYWHERE is rejected with 400 before the filesystem is touched. Names like
"/notes..txt" are rejected too.

=============================================================================
RESOLUTION STEPS
=============================================================================

    Request path: /docs/
          │
          ▼
    1. Safety check ─────────── fails → 400 Bad Request
          │
          ▼
    2. root + path ──────────── "public" + "/docs/" = "public/docs/"
          │
          ▼
    3. Directory? ───────────── yes → "public/docs/index.html"
          │
          ▼
    4. open() ───────────────── fails → 404 Not Found
          │
          ▼
    5. fstat() ──────────────── fails → 500
          │
          ▼
    6-7. read whole file ────── short read or no memory → 500
          │
          ▼
    8. 200 OK, Content-Type from the FINAL path's extension

=============================================================================
"""

import os
import logging

from ..http.response import (
    HTTPResponse,
    ok,
    bad_request,
    not_found,
    internal_error,
)
from ..http.mime_types import get_mime_type


logger = logging.getLogger(__name__)


def is_safe_path(path: str) -> bool:
    """True if `path` starts with "/" and contains no ".." sequence."""
    return path.startswith("/") and ".." not in path


class StaticFileHandler:
    """
    Resolves request paths to files under a document root.

    Usage:
        static = StaticFileHandler("public")
        response = static.serve("/css/site.css")
    """

    def __init__(self, document_root: str, index_file: str = "index.html"):
        """
        Args:
            document_root: Directory files are served from. Used as a plain
                           string prefix, exactly as configured.
            index_file: File served for directory requests.
        """
        self.document_root = document_root
        self.index_file = index_file

        if not os.path.isdir(document_root):
            logger.warning(f"Document root does not exist: {document_root}")

    def resolve(self, path: str) -> str:
        """
        Map a request path to a filesystem path (steps 2-3).

        Does not check safety; callers must run is_safe_path() first.
        """
        full_path = self.document_root + path

        if os.path.isdir(full_path):
            if not full_path.endswith(os.sep):
                full_path += os.sep
            full_path += self.index_file

        return full_path

    def serve(self, path: str) -> HTTPResponse:
        """
        Serve the file at `path`, or an error response.

        Never raises for filesystem problems; every failure is mapped to a
        status code.
        """
        if not is_safe_path(path):
            logger.warning(f"Rejected unsafe path: {path!r}")
            return bad_request()

        full_path = self.resolve(path)

        try:
            f = open(full_path, "rb")
        except OSError as e:
            logger.debug(f"Cannot open {full_path}: {e}")
            return not_found()

        # `with` closes the file on every exit path below
        with f:
            try:
                size = os.fstat(f.fileno()).st_size
            except OSError as e:
                logger.error(f"Cannot stat {full_path}: {e}")
                return internal_error()

            try:
                content = f.read(size)
            except MemoryError:
                logger.error(f"Out of memory reading {full_path} ({size} bytes)")
                return internal_error()
            except OSError as e:
                logger.error(f"Error reading {full_path}: {e}")
                return internal_error()

            if len(content) != size:
                logger.error(
                    f"Short read on {full_path}: got {len(content)} of {size} bytes"
                )
                return internal_error()

        return ok(content, get_mime_type(full_path))
