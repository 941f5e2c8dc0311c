"""
=============================================================================
MIME TYPE DETECTION
=============================================================================

Maps a file extension to the Content-Type sent with static files.

    ┌────────────────────────────────────────────────────────────────────┐
    │  EXTENSION        MIME TYPE                                        │
    │  ──────────────────────────────────────────────────────────────── │
    │  .html / .htm     text/html; charset=utf-8                        │
    │  .css             text/css; charset=utf-8                         │
    │  .js              application/javascript                          │
    │  .png             image/png                                       │
    │  (anything else)  application/octet-stream                        │
    └────────────────────────────────────────────────────────────────────┘

The table is an ordered tuple rather than a dict: lookups scan it in order
and the first matching entry wins. It is built once at import time and
never modified, so every connection thread can read it without locking.

=============================================================================
"""

from typing import Tuple


MIME_TYPES: Tuple[Tuple[str, str], ...] = (
    (".html", "text/html; charset=utf-8"),
    (".htm", "text/html; charset=utf-8"),
    (".css", "text/css; charset=utf-8"),
    (".js", "application/javascript"),
    (".mjs", "application/javascript"),
    (".json", "application/json"),
    (".xml", "application/xml"),
    (".txt", "text/plain; charset=utf-8"),
    (".md", "text/markdown; charset=utf-8"),
    (".csv", "text/csv; charset=utf-8"),

    (".png", "image/png"),
    (".jpg", "image/jpeg"),
    (".jpeg", "image/jpeg"),
    (".gif", "image/gif"),
    (".svg", "image/svg+xml"),
    (".ico", "image/x-icon"),
    (".webp", "image/webp"),

    (".woff", "font/woff"),
    (".woff2", "font/woff2"),
    (".ttf", "font/ttf"),

    (".mp3", "audio/mpeg"),
    (".wav", "audio/wav"),
    (".mp4", "video/mp4"),
    (".webm", "video/webm"),

    (".pdf", "application/pdf"),
    (".zip", "application/zip"),
    (".gz", "application/gzip"),
    (".wasm", "application/wasm"),
)

DEFAULT_MIME_TYPE = "application/octet-stream"


def get_mime_type(path: str) -> str:
    """
    Get the MIME type for a path from its extension.

    The extension is everything from the LAST "." in the path, compared
    case-insensitively.

    Examples:
        >>> get_mime_type("/css/site.CSS")
        'text/css; charset=utf-8'

        >>> get_mime_type("/archive.tar.gz")
        'application/gzip'

        >>> get_mime_type("/README")
        'application/octet-stream'
    """
    dot = path.rfind(".")
    if dot == -1:
        return DEFAULT_MIME_TYPE

    extension = path[dot:].lower()
    for known, mime_type in MIME_TYPES:
        if extension == known:
            return mime_type

    return DEFAULT_MIME_TYPE
