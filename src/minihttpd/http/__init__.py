"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ request.py      Request line + query string parsing                 │
    │ response.py     HTTPResponse and its wire serialization             │
    │ buffer.py       Growable buffer the response is assembled in        │
    │ router.py       Fixed route table and GET dispatch                  │
    │ status_codes.py HTTPStatus enum with reason phrases                 │
    │ mime_types.py   Extension → Content-Type table                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import (
    HTTPRequest,
    HTTPParseError,
    parse_request,
    parse_request_line,
    parse_query_string,
    url_decode,
)
from .response import (
    HTTPResponse,
    ok,
    html,
    json_response,
    error_response,
    bad_request,
    not_found,
    method_not_allowed,
    internal_error,
)
from .buffer import ResponseBuffer, ResponseBufferError
from .router import Router, Route
from .status_codes import HTTPStatus
from .mime_types import get_mime_type, DEFAULT_MIME_TYPE

__all__ = [
    # Request parsing
    "HTTPRequest",
    "HTTPParseError",
    "parse_request",
    "parse_request_line",
    "parse_query_string",
    "url_decode",

    # Responses
    "HTTPResponse",
    "ok",
    "html",
    "json_response",
    "error_response",
    "bad_request",
    "not_found",
    "method_not_allowed",
    "internal_error",

    # Buffer
    "ResponseBuffer",
    "ResponseBufferError",

    # Routing
    "Router",
    "Route",

    # Status codes
    "HTTPStatus",

    # MIME types
    "get_mime_type",
    "DEFAULT_MIME_TYPE",
]
