"""
Unit tests for the route table and dispatcher.
"""

import pytest

from minihttpd.http.request import HTTPRequest
from minihttpd.http.response import ok, not_found, HTTPResponse
from minihttpd.http.router import Router, Route
from minihttpd.http.status_codes import HTTPStatus


def _handler(body: str):
    def handler(request: HTTPRequest) -> HTTPResponse:
        return ok(body)
    return handler


def _not_found(path: str) -> HTTPResponse:
    return not_found()


@pytest.fixture
def router() -> Router:
    return Router([
        Route("/", _handler("home")),
        Route("/about", _handler("about")),
    ], fallback=_not_found)


class TestRouter:
    """Tests for Router class."""

    def test_exact_match(self, router: Router):
        response = router.dispatch(HTTPRequest(method="GET", path="/about"))

        assert response.status == HTTPStatus.OK
        assert response.body == b"about"

    def test_no_prefix_match(self, router: Router):
        """'/about/' and '/aboutx' are different paths."""
        assert router.match("/about/") is None
        assert router.match("/aboutx") is None

    def test_first_match_wins(self):
        router = Router([
            Route("/dup", _handler("first")),
            Route("/dup", _handler("second")),
        ], fallback=_not_found)

        assert router.dispatch(HTTPRequest(method="GET", path="/dup")).body == b"first"

    def test_method_checked_before_lookup(self, router: Router):
        """A non-GET request gets 405 even for a known route."""
        response = router.dispatch(HTTPRequest(method="POST", path="/"))

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED

    def test_lowercase_get_is_not_get(self, router: Router):
        response = router.dispatch(HTTPRequest(method="get", path="/"))

        assert response.status == HTTPStatus.METHOD_NOT_ALLOWED

    def test_fallback_response_returned_as_is(self):
        """The router adds no 404 of its own; the fallback decides."""
        expected = HTTPResponse(status=HTTPStatus.OK, body=b"fallback body")
        router = Router([Route("/", _handler("home"))], fallback=lambda path: expected)

        assert router.dispatch(HTTPRequest(method="GET", path="/missing")) is expected

    def test_fallback_not_found(self, router: Router):
        response = router.dispatch(HTTPRequest(method="GET", path="/missing"))

        assert response.status == HTTPStatus.NOT_FOUND

    def test_fallback_receives_path(self):
        seen = []

        def fallback(path: str) -> HTTPResponse:
            seen.append(path)
            return ok("from fallback")

        router = Router([Route("/", _handler("home"))], fallback=fallback)
        response = router.dispatch(HTTPRequest(method="GET", path="/file.txt", query_string="a=1"))

        assert response.body == b"from fallback"
        assert seen == ["/file.txt"]

    def test_fallback_not_called_for_routes(self):
        def fallback(path: str) -> HTTPResponse:
            raise AssertionError("fallback should not run")

        router = Router([Route("/", _handler("home"))], fallback=fallback)

        assert router.dispatch(HTTPRequest(method="GET", path="/")).body == b"home"

    def test_routes_are_immutable(self):
        routes = [Route("/", _handler("home"))]
        router = Router(routes, fallback=_not_found)
        routes.append(Route("/late", _handler("late")))

        assert isinstance(router.routes, tuple)
        assert len(router.routes) == 1
        assert router.match("/late") is None

    def test_handler_errors_propagate(self):
        def broken(request: HTTPRequest) -> HTTPResponse:
            raise RuntimeError("boom")

        router = Router([Route("/broken", broken)], fallback=_not_found)

        with pytest.raises(RuntimeError):
            router.dispatch(HTTPRequest(method="GET", path="/broken"))
