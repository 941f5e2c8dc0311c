"""
=============================================================================
HTTP RESPONSE BUILDING
=============================================================================

Every response this server sends has the same shape:

    HTTP/1.1 200 OK\r\n                         ← Status line
    Content-Type: text/html; charset=utf-8\r\n
    Content-Length: 27\r\n                      ← Always the body length
    Connection: close\r\n                       ← No keep-alive, ever
    \r\n                                        ← Empty line
    <h1>Hello</h1>...                           ← Body bytes

There is no Date header. Two identical requests therefore get
byte-identical responses, which keeps caches and tests simple.

=============================================================================
SERIALIZATION
=============================================================================

to_bytes() assembles the whole message in a ResponseBuffer:

    HTTPResponse ──to_buffer()──► ResponseBuffer ──getvalue()──► sendall()

Header lines go through append_format() (bounded scratch area), the body
through append() (unbounded, capacity doubles as needed).

=============================================================================
"""

from dataclasses import dataclass
from typing import Any, Union
import json

from .buffer import ResponseBuffer
from .status_codes import HTTPStatus


@dataclass
class HTTPResponse:
    """
    A response ready to be serialized.

    Handlers return one of these; the connection handler turns it into
    bytes and writes it once.
    """

    status: HTTPStatus = HTTPStatus.OK
    content_type: str = "text/plain; charset=utf-8"
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """E.g. "HTTP/1.1 200 OK"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def content_length(self) -> int:
        return len(self.body)

    def to_buffer(self) -> ResponseBuffer:
        """
        Assemble status line, headers and body into a new ResponseBuffer.

        The caller owns the returned buffer and should free() it after
        writing.

        Raises:
            ResponseBufferError: A header line overflowed the scratch area.
            MemoryError: The buffer could not grow to fit the body.
        """
        buf = ResponseBuffer()
        buf.append_format("{}\r\n", self.status_line)
        buf.append_format("Content-Type: {}\r\n", self.content_type)
        buf.append_format("Content-Length: {}\r\n", self.content_length)
        buf.append_format("Connection: close\r\n\r\n")
        buf.append(self.body)
        return buf

    def to_bytes(self) -> bytes:
        """Serialize to the exact bytes sent on the wire."""
        buf = self.to_buffer()
        try:
            return buf.getvalue()
        finally:
            buf.free()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def ok(body: Union[str, bytes], content_type: str = "text/plain; charset=utf-8") -> HTTPResponse:
    """200 OK with the given body. Strings are encoded as UTF-8."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    return HTTPResponse(status=HTTPStatus.OK, content_type=content_type, body=body)


def html(markup: str) -> HTTPResponse:
    """200 OK with an HTML body."""
    return ok(markup, "text/html; charset=utf-8")


def json_response(data: Any) -> HTTPResponse:
    """
    200 OK with a JSON body.

    Keys are sorted and separators are compact, so the same data always
    serializes to the same bytes.
    """
    body = json.dumps(data, sort_keys=True, separators=(",", ":"))
    return ok(body, "application/json")


def error_response(status: HTTPStatus) -> HTTPResponse:
    """
    Plain-text error page, e.g. "404 Not Found\\n".

    Used for every 4xx/5xx this server produces.
    """
    body = f"{int(status)} {status.phrase}\n".encode("utf-8")
    return HTTPResponse(status=status, content_type="text/plain; charset=utf-8", body=body)


def bad_request() -> HTTPResponse:
    return error_response(HTTPStatus.BAD_REQUEST)


def not_found() -> HTTPResponse:
    return error_response(HTTPStatus.NOT_FOUND)


def method_not_allowed() -> HTTPResponse:
    return error_response(HTTPStatus.METHOD_NOT_ALLOWED)


def internal_error() -> HTTPResponse:
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR)
