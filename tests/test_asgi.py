"""Tests for the ASGI entry point: protocol guard, freezing and lifespan."""

import pytest

from wayfinder.config import RouterConfig
from wayfinder.errors import ConfigurationError
from wayfinder.routing.router import Router
from wayfinder.testing import TestClient


async def hello(response, request) -> None:
    await response.string(200, "Hello")


def _config(protocol: str) -> RouterConfig:
    return RouterConfig(protocol=protocol, host="127.0.0.1", port=1235, https_port=1236)


class TestProtocolGuard:
    async def test_http_to_https(self) -> None:
        router = Router(_config("https"))
        response = await TestClient(router).get("http://localhost:443/test?param=1")
        assert response.status == 308
        assert response.header("location") == "https://127.0.0.1:1236/test?param=1"
        assert response.text == '<a href="https://127.0.0.1:1236/test?param=1">Permanent Redirect</a>.\n\n'

    async def test_https_to_http(self) -> None:
        router = Router(_config("http"))
        response = await TestClient(router).get("https://localhost:80/test?param=1")
        assert response.status == 308
        assert response.text == '<a href="http://127.0.0.1:1235/test?param=1">Permanent Redirect</a>.\n\n'

    async def test_bare_path_not_redirected(self) -> None:
        router = Router(_config("https"))
        response = await TestClient(router).get("/test?param=1")
        assert response.status == 404
        assert response.text == '{"error":"Not Found"}\n'

    async def test_matching_scheme_dispatches(self) -> None:
        router = Router(_config("https"))
        router.get("/test", hello)
        response = await TestClient(router).get("https://localhost:1236/test")
        assert response.status == 200
        assert response.text == "Hello"

    async def test_query_sorted_and_path_kept(self) -> None:
        router = Router(_config("https"))
        response = await TestClient(router).get("http://localhost/a/b?z=1&a=2&a=3")
        assert response.header("location") == "https://127.0.0.1:1236/a/b?a=2&a=3&z=1"

    async def test_domain_and_default_port(self) -> None:
        router = Router(RouterConfig(protocol="https", domain="example.org", https_port=443))
        response = await TestClient(router).get("http://localhost/x")
        assert response.header("location") == "https://example.org/x"

    async def test_redirect_logged(self, caplog) -> None:
        router = Router(_config("https"))
        with caplog.at_level("DEBUG", logger="wayfinder.server"):
            await TestClient(router).get("http://localhost/x")
        assert any(
            record.name == "wayfinder.server" and "Redirecting" in record.getMessage()
            for record in caplog.records
        )


class TestDispatchThroughASGI:
    async def test_found(self) -> None:
        router = Router()
        router.get("/hello", hello)
        response = await TestClient(router).get("/hello")
        assert response.status == 200
        assert response.text == "Hello"
        assert response.header("content-type") == "text/plain; charset=utf-8"

    async def test_method_not_allowed(self) -> None:
        router = Router()
        router.get("/hello", hello)
        response = await TestClient(router).delete("/hello")
        assert response.status == 405
        assert response.json() == {"error": "Method Not Allowed"}

    async def test_params(self) -> None:
        async def show(response, request) -> None:
            await response.json(200, request.params)

        router = Router()
        router.subrouter("/shop/{shop}").get("/item/{id:[0-9]+}", show)
        response = await TestClient(router).get("/shop/north/item/7")
        assert response.json() == {"shop": "north", "id": "7"}

    async def test_root_index(self) -> None:
        router = Router()
        router.get("/", lambda response, request: response.string(200, "home"))
        response = await TestClient(router).get("/")
        assert response.status == 200
        assert response.text == "home"

    async def test_subrouter_index(self) -> None:
        router = Router()
        router.subrouter("/product").get("/", lambda response, request: response.string(200, "products"))
        response = await TestClient(router).get("/product")
        assert response.status == 200
        assert response.text == "products"

    async def test_subrouter_served_alone_keeps_recovery(self) -> None:
        def boom(response, request) -> None:
            raise RuntimeError("boom")

        def build() -> Router:
            root = Router()
            api = root.subrouter("/api")
            api.route("GET", "/x", boom)
            return api

        response = await TestClient(build()).get("/api/x")
        assert response.status == 500
        assert response.json() == {"error": "Internal Server Error"}

    async def test_match_logged(self, caplog) -> None:
        router = Router()
        router.get("/hello", hello)
        with caplog.at_level("DEBUG", logger="wayfinder.router"):
            await TestClient(router).get("/hello")
        assert any("GET /hello matched" in record.getMessage() for record in caplog.records)

    async def test_non_http_scope_ignored(self) -> None:
        sent = []

        async def send(message) -> None:
            sent.append(message)

        async def receive():
            return {"type": "websocket.connect"}

        await Router()({"type": "websocket", "path": "/"}, receive, send)
        assert sent == []


class TestFreeze:
    async def test_registration_after_first_request(self) -> None:
        router = Router()
        sub = router.subrouter("/sub")
        router.get("/hello", hello)
        await TestClient(router).get("/hello")

        with pytest.raises(ConfigurationError, match="after it has started"):
            router.get("/late", hello)
        with pytest.raises(ConfigurationError):
            sub.get("/late", hello)
        with pytest.raises(ConfigurationError):
            router.subrouter("/late")
        with pytest.raises(ConfigurationError):
            router.middleware(lambda next: next)
        with pytest.raises(ConfigurationError):
            router.status_handler(hello, 404)

    def test_freeze_from_subrouter_freezes_tree(self) -> None:
        router = Router()
        sub = router.subrouter("/sub")
        sub.freeze()
        with pytest.raises(ConfigurationError):
            router.get("/late", hello)

    async def test_lifespan_freezes(self) -> None:
        router = Router()
        messages = iter([{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}])
        sent = []

        async def receive():
            return next(messages)

        async def send(message) -> None:
            sent.append(message["type"])

        await router({"type": "lifespan"}, receive, send)
        assert sent == ["lifespan.startup.complete", "lifespan.shutdown.complete"]
        with pytest.raises(ConfigurationError):
            router.get("/late", hello)
