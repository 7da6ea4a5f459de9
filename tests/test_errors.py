"""Tests for the exception hierarchy and default status handlers."""

import pytest

from wayfinder.errors import ConfigurationError, HTTPError, WayfinderError
from wayfinder.http.response import Response
from wayfinder.server.errors import error_status_handler, panic_status_handler
from wayfinder.testing import ResponseRecorder, make_request


class TestHierarchy:
    def test_subclasses(self) -> None:
        assert issubclass(ConfigurationError, WayfinderError)
        assert issubclass(HTTPError, WayfinderError)

    def test_http_error_str(self) -> None:
        assert str(HTTPError(404)) == "404"
        assert str(HTTPError(403, "nope")) == "403: nope"

    def test_http_error_raisable(self) -> None:
        with pytest.raises(HTTPError) as exc_info:
            raise HTTPError(418, "teapot")
        assert exc_info.value.status == 418


class TestStatusHandlers:
    async def test_panic_status_handler(self) -> None:
        recorder = ResponseRecorder()
        response = Response(recorder.send)
        response.err = RuntimeError("random error")
        await panic_status_handler(response, make_request("/uri"))
        result = recorder.result()
        assert result.status == 500
        assert result.json() == {"error": "Internal Server Error"}

    async def test_panic_status_handler_debug(self) -> None:
        recorder = ResponseRecorder()
        response = Response(recorder.send, debug=True)
        response.err = RuntimeError("random error")
        await panic_status_handler(response, make_request("/uri"))
        assert recorder.result().json() == {"error": "random error"}

    async def test_panic_status_handler_without_error(self) -> None:
        recorder = ResponseRecorder()
        response = Response(recorder.send)
        response.status(500)
        await panic_status_handler(response, make_request("/uri"))
        assert recorder.result().status == 500

    async def test_error_status_handler(self) -> None:
        recorder = ResponseRecorder()
        response = Response(recorder.send)
        response.status(404)
        await error_status_handler(response, make_request("/uri"))
        result = recorder.result()
        assert result.status == 404
        assert result.header("content-type") == "application/json"
        assert result.text == '{"error":"Not Found"}\n'
