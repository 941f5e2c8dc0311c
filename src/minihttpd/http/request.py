"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

This module turns the raw bytes read from a socket into an HTTPRequest.

Only the REQUEST LINE is interpreted. Headers and any body that follow it
are read off the wire but ignored.

=============================================================================
REQUEST LINE FORMAT
=============================================================================

    METHOD SP REQUEST-URI SP HTTP-VERSION CRLF

    Example: "GET /about?x=1&y=two%20words HTTP/1.1"
              ─┬─ ──┬─── ────────┬──────── ────┬───
               │    │            │             │
            Method Path   Query string     Version (ignored)

=============================================================================
BOUNDS
=============================================================================

Every piece of the request line lives in a fixed-size field:

    method   16 bytes     longer → 400
    URI      512 bytes    longer → 400
    query    32 pairs     extra pairs are dropped
    key      128 bytes    decoded output truncated to 127
    value    256 bytes    decoded output truncated to 255

=============================================================================
PERCENT DECODING
=============================================================================

Only query keys and values are decoded. The path is used exactly as sent:
its bytes reach the filesystem unchanged, whatever their encoding.

    "%20"   → " "      valid triplet
    "+"     → " "      form encoding
    "%2"    → "%2"     incomplete, copied through
    "%zz"   → "%zz"    invalid hex, copied through

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional, List, Tuple


MAX_METHOD_LENGTH = 16
MAX_PATH_LENGTH = 512
MAX_QUERY_PARAMS = 32
MAX_KEY_SIZE = 128
MAX_VALUE_SIZE = 256

_HEX_DIGITS = b"0123456789abcdefABCDEF"


class HTTPParseError(Exception):
    """
    Raised when the request line cannot be parsed.

    Carries the HTTP status code that should be sent back, so callers can
    render the error without knowing why parsing failed.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed request.

    Immutable once built. Query parameters are kept as an ordered tuple of
    pairs because keys may repeat and order matters for lookups:

        "?tag=a&tag=b" → (("tag", "a"), ("tag", "b"))
    """

    method: str
    path: str
    query: Tuple[Tuple[str, str], ...] = ()
    query_string: str = ""

    def get_query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return the value of the first pair whose key is `name`."""
        for key, value in self.query:
            if key == name:
                return value
        return default

    def get_query_list(self, name: str) -> List[str]:
        """Return every value for `name`, in request order."""
        return [value for key, value in self.query if key == name]


def parse_request_line(raw: bytes) -> Tuple[str, str, str]:
    """
    Split the request line into method, path and raw query string.

    Args:
        raw: Bytes read from the socket. Only the first line is inspected,
             and a NUL byte ends it.

    Returns:
        (method, path, query_string). query_string is "" when the URI has no
        "?".

    Raises:
        HTTPParseError: Missing spaces, empty fields, or fields longer than
                        their bounds.
    """
    line = raw.split(b"\x00", 1)[0]
    line_end = line.find(b"\n")
    if line_end != -1:
        line = line[:line_end]
    line = line.rstrip(b"\r")

    # ─────────────────────────────────────────────────────────────────────
    # METHOD: everything before the first space
    # ─────────────────────────────────────────────────────────────────────
    first_space = line.find(b" ")
    if first_space <= 0:
        raise HTTPParseError("Malformed request line: no method")
    if first_space > MAX_METHOD_LENGTH:
        raise HTTPParseError(f"Method too long: {first_space} bytes")

    # ─────────────────────────────────────────────────────────────────────
    # URI: between the first and second space
    # ─────────────────────────────────────────────────────────────────────
    uri_start = first_space + 1
    second_space = line.find(b" ", uri_start)
    if second_space == -1:
        raise HTTPParseError("Malformed request line: no protocol version")

    uri_length = second_space - uri_start
    if uri_length == 0:
        raise HTTPParseError("Malformed request line: empty URI")
    if uri_length > MAX_PATH_LENGTH:
        raise HTTPParseError(f"URI too long: {uri_length} bytes")

    method = line[:first_space].decode("latin-1")
    # surrogateescape: raw non-UTF-8 bytes survive the round trip to open()
    uri = line[uri_start:second_space].decode("utf-8", "surrogateescape")

    path, _, query_string = uri.partition("?")
    return method, path, query_string


def url_decode(raw: bytes, size: int) -> bytes:
    """
    Percent- and plus-decode `raw` into at most `size - 1` bytes.

    Invalid or incomplete escapes are copied through unchanged. Output
    beyond the limit is silently dropped.
    """
    limit = size - 1
    out = bytearray()
    i = 0
    n = len(raw)

    while i < n and len(out) < limit:
        byte = raw[i]
        if (
            byte == 0x25  # "%"
            and i + 2 < n
            and raw[i + 1] in _HEX_DIGITS
            and raw[i + 2] in _HEX_DIGITS
        ):
            out.append(int(raw[i + 1:i + 3], 16))
            i += 3
        elif byte == 0x2B:  # "+"
            out.append(0x20)
            i += 1
        else:
            out.append(byte)
            i += 1

    return bytes(out)


def parse_query_string(raw: str) -> List[Tuple[str, str]]:
    """
    Parse "a=1&b=two%20words" into [("a", "1"), ("b", "two words")].

    Segments without "=" are dropped. Only the first "=" splits, so
    "k=a=b" gives ("k", "a=b"). Parsing stops after MAX_QUERY_PARAMS pairs.
    """
    pairs: List[Tuple[str, str]] = []
    if not raw:
        return pairs

    for segment in raw.split("&"):
        if len(pairs) >= MAX_QUERY_PARAMS:
            break
        if "=" not in segment:
            continue

        key, _, value = segment.partition("=")
        pairs.append((
            _decode_text(key, MAX_KEY_SIZE),
            _decode_text(value, MAX_VALUE_SIZE),
        ))

    return pairs


def _decode_text(text: str, size: int) -> str:
    decoded = url_decode(text.encode("utf-8", "surrogateescape"), size)
    return decoded.decode("utf-8", errors="replace")


def parse_request(raw: bytes) -> HTTPRequest:
    """
    Parse raw request bytes into an HTTPRequest in one call.

    Raises:
        HTTPParseError: If the request line is malformed.
    """
    method, path, query_string = parse_request_line(raw)
    return HTTPRequest(
        method=method,
        path=path,
        query=tuple(parse_query_string(query_string)),
        query_string=query_string,
    )
