"""
Unit tests for the route table.
"""

from microserve.http.method import Method
from microserve.http.request import Request
from microserve.http.router import Route, RouteTable
from microserve.session import Session


def make_request(resource: str) -> Request:
    return Request(method=Method.GET, resource=resource)


class TestRouteTable:
    """Tests for RouteTable class."""

    def test_lookup_exact_match(self):
        routes = RouteTable()

        @routes.route("/hello")
        def hello(request, session):
            return "hi"

        route = routes.lookup("/hello")
        assert route is not None
        assert route.path == "/hello"
        assert route.handler is hello
        assert route.handler(make_request("/hello"), Session()) == "hi"

    def test_lookup_miss(self):
        routes = RouteTable()
        routes.register("/hello", lambda request, session: "hi")

        assert routes.lookup("/missing") is None

    def test_no_prefix_or_normalization(self):
        """Matching is whole-string equality only."""
        routes = RouteTable()
        routes.register("/users", lambda request, session: "users")

        assert routes.lookup("/users/") is None
        assert routes.lookup("/users?page=2") is None
        assert routes.lookup("/Users") is None
        assert routes.lookup("/use") is None

    def test_query_string_route(self):
        """A resource with a query string is a route of its own."""
        routes = RouteTable()
        routes.register("/a?x=1", lambda request, session: "with query")

        assert routes.lookup("/a?x=1") is not None
        assert routes.lookup("/a") is None

    def test_first_registration_wins(self):
        routes = RouteTable()

        def first(request, session):
            return "first"

        def second(request, session):
            return "second"

        assert routes.register("/x", first).handler is first
        result = routes.register("/x", second)

        assert result.handler is first
        assert routes.lookup("/x").handler is first
        assert len(routes) == 1

    def test_decorator_conflict_keeps_first(self):
        routes = RouteTable()

        @routes.get("/page")
        def get_page(request, session):
            return "get"

        @routes.post("/page")
        def post_page(request, session):
            return "post"

        assert routes.lookup("/page").handler is get_page

    def test_decorator_returns_handler(self):
        routes = RouteTable()

        def handler(request, session):
            return "ok"

        assert routes.route("/x")(handler) is handler

    def test_registration_order_kept(self):
        routes = RouteTable()
        for path in ["/c", "/a", "/b"]:
            routes.register(path, lambda request, session: path)

        assert [route.path for route in routes] == ["/c", "/a", "/b"]
        assert [route.path for route in routes.routes()] == ["/c", "/a", "/b"]

    def test_contains(self):
        routes = RouteTable()
        routes.register("/x", lambda request, session: "x")

        assert "/x" in routes
        assert "/y" not in routes
        assert 42 not in routes

    def test_routes_returns_copy(self):
        routes = RouteTable()
        routes.register("/x", lambda request, session: "x")

        listing = routes.routes()
        listing.clear()

        assert len(routes) == 1


class TestRoute:
    """Tests for Route."""

    def test_route_is_value(self):
        def handler(request, session):
            return ""

        assert Route("/x", handler) == Route("/x", handler)

    def test_log_routes(self, caplog):
        routes = RouteTable()

        @routes.route("/hello")
        def hello(request, session):
            return "hi"

        with caplog.at_level("INFO", logger="microserve.http.router"):
            routes.log_routes()

        assert "Registered routes (1)" in caplog.text
        assert "/hello" in caplog.text
        assert "hello" in caplog.text
