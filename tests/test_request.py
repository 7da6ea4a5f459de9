"""Tests for Request."""

import base64

import pytest

from wayfinder.http.request import Request
from wayfinder.testing import build_scope, make_request


class TestFromASGI:
    def test_basic_fields(self) -> None:
        request = make_request("/users/1?page=2&tag=a&tag=b", "post", headers={"User-Agent": "tests"})
        assert request.method == "POST"
        assert request.path == "/users/1"
        assert request.query["page"] == "2"
        assert request.query.get_list("tag") == ["a", "b"]
        assert request.user_agent == "tests"
        assert request.scheme is None
        assert request.url == "/users/1?page=2&tag=a&tag=b"

    def test_absolute_url_sets_scheme_and_server(self) -> None:
        request = make_request("https://localhost:8443/x")
        assert request.scheme == "https"
        assert request.server == ("localhost", 8443)

    def test_defaults(self) -> None:
        request = make_request()
        assert request.params == {}
        assert request.data is None
        assert request.route is None
        assert request.get_cors_options() is None
        assert request.remote_address == "127.0.0.1:0"

    def test_cookies(self) -> None:
        request = make_request(headers={"Cookie": 'a=1; b="two"; a=3'})
        assert request.cookies == {"a": "1", "b": "two"}

    def test_content_length(self) -> None:
        assert make_request(headers={"Content-Length": "12"}).content_length == 12
        assert make_request(headers={"Content-Length": "abc"}).content_length is None
        assert make_request().content_length is None


class TestAuthorization:
    def test_bearer(self) -> None:
        assert make_request(headers={"Authorization": "Bearer tok"}).bearer_token() == "tok"
        assert make_request(headers={"Authorization": "Basic tok"}).bearer_token() is None
        assert make_request().bearer_token() is None

    def test_basic(self) -> None:
        encoded = base64.b64encode(b"ada:lovelace").decode()
        request = make_request(headers={"Authorization": f"Basic {encoded}"})
        assert request.basic_auth() == ("ada", "lovelace")
        assert make_request(headers={"Authorization": "Basic !!"}).basic_auth() is None


class TestBody:
    async def test_body_cached(self) -> None:
        request = make_request("/", "POST", body=b"payload")
        assert await request.body() == b"payload"
        assert await request.body() == b"payload"

    async def test_json_and_text(self) -> None:
        request = make_request("/", "POST", body=b'{"a": 1}')
        assert await request.json() == {"a": 1}
        assert await request.text() == '{"a": 1}'

    async def test_stream_multiple_chunks(self) -> None:
        messages = iter(
            [
                {"type": "http.request", "body": b"ab", "more_body": True},
                {"type": "http.request", "body": b"cd", "more_body": False},
            ]
        )

        async def receive():
            return next(messages)

        request = Request.from_asgi(build_scope("POST", "/"), receive)
        assert [chunk async for chunk in request.stream()] == [b"ab", b"cd"]

    async def test_stream_stops_on_disconnect(self) -> None:
        async def receive():
            return {"type": "http.disconnect"}

        request = Request.from_asgi(build_scope("POST", "/"), receive)
        assert await request.body() == b""


class TestData:
    def test_has(self) -> None:
        request = make_request()
        assert not request.has("name")
        request.data = {"name": "Ada"}
        assert request.has("name")

    @pytest.mark.parametrize("header", ["application/json", "application/json; charset=utf-8"])
    def test_content_type(self, header: str) -> None:
        assert make_request(headers={"Content-Type": header}).content_type == header
