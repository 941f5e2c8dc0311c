"""
=============================================================================
BUILT-IN PAGES
=============================================================================

The handlers behind the fixed route table:

    GET /         home page (HTML)
    GET /about    about page (HTML)
    GET /health   health check (JSON)

Each one is a pure function of the request: fixed body, fixed content type,
no state. That makes them safe to call from any number of connection
threads at once, and means the same request always produces the same
bytes.

=============================================================================
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, html, json_response
from ..http.router import Route


HOME_PAGE = """<!DOCTYPE html>
<html>
<head>
    <title>minihttpd</title>
</head>
<body>
    <h1>minihttpd</h1>
    <p>A minimal HTTP/1.1 server.</p>
    <ul>
        <li><a href="/about">About</a></li>
        <li><a href="/health">Health check</a></li>
    </ul>
</body>
</html>
"""

ABOUT_PAGE = """<!DOCTYPE html>
<html>
<head>
    <title>About - minihttpd</title>
</head>
<body>
    <h1>About</h1>
    <p>One thread per connection, one response per connection.</p>
    <p>Anything not listed on the <a href="/">home page</a> is served from
    the document root.</p>
</body>
</html>
"""

HEALTH_STATUS = {"status": "ok"}


def home(request: HTTPRequest) -> HTTPResponse:
    return html(HOME_PAGE)


def about(request: HTTPRequest) -> HTTPResponse:
    return html(ABOUT_PAGE)


def health(request: HTTPRequest) -> HTTPResponse:
    """
    Liveness check for load balancers and orchestrators.

    Always healthy: if this handler runs, the process is accepting and
    serving connections.
    """
    return json_response(HEALTH_STATUS)


BUILTIN_ROUTES = (
    Route("/", home),
    Route("/about", about),
    Route("/health", health),
)
