"""Test helpers: drive a router through ASGI without a server."""

from wayfinder.testing.client import (
    ResponseRecorder,
    TestClient,
    TestResponse,
    body_receiver,
    build_scope,
    make_request,
)

__all__ = [
    "ResponseRecorder",
    "TestClient",
    "TestResponse",
    "body_receiver",
    "build_scope",
    "make_request",
]
