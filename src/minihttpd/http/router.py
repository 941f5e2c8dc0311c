"""
=============================================================================
ROUTE TABLE & DISPATCHER
=============================================================================

The router decides who answers a request:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          dispatch(request)                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   method != GET ?  ─── yes ──►  405 Method Not Allowed               │
    │        │                                                             │
    │        no                                                            │
    │        ▼                                                             │
    │   scan route table in order                                          │
    │        │                                                             │
    │        ├── exact path match ──►  route.handler(request)              │
    │        │                                                             │
    │        └── no match ─────────►  fallback(request.path)               │
    │                                  (static files; its 404 is final)    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
A CLOSED ROUTE TABLE
=============================================================================

Routes are fixed when the server starts. There is no decorator
registration and no path parameters: a route is an exact string and a
handler. The table is a tuple, so it cannot be changed after construction
and every connection thread can scan it without a lock.

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple

from .request import HTTPRequest
from .response import HTTPResponse, method_not_allowed


Handler = Callable[[HTTPRequest], HTTPResponse]
Fallback = Callable[[str], HTTPResponse]


@dataclass(frozen=True)
class Route:
    """An exact request path bound to a handler."""

    path: str
    handler: Handler


class Router:
    """
    Dispatches GET requests to a fixed route table, then to a fallback.

    Usage:
        router = Router(
            [Route("/", home), Route("/health", health)],
            fallback=static.serve,
        )
        response = router.dispatch(request)
    """

    def __init__(self, routes: Iterable[Route], fallback: Fallback):
        """
        Args:
            routes: Routes in match order. Copied into an immutable tuple.
            fallback: Called with the request path when no route matches.
                      Its response, including a 404, is returned as-is.
        """
        self._routes: Tuple[Route, ...] = tuple(routes)
        self._fallback = fallback

    @property
    def routes(self) -> Tuple[Route, ...]:
        return self._routes

    def match(self, path: str) -> Optional[Route]:
        """Return the first route whose path equals `path` exactly."""
        for route in self._routes:
            if route.path == path:
                return route
        return None

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """
        Produce the response for `request`.

        Only GET is dispatchable. Handler exceptions propagate to the
        caller.
        """
        if request.method != "GET":
            return method_not_allowed()

        route = self.match(request.path)
        if route is not None:
            return route.handler(request)

        return self._fallback(request.path)
