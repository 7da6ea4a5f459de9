"""HTTP request.

Transport metadata (method, path, headers, etc.) is fixed at creation.
Routing and middleware state (``params``, ``data``, ``lang``, ``route``,
``cors_options``) is filled in as the request moves through dispatch.
The body is accessed asynchronously via ``.body()``, ``.json()``, ``.text()``.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from wayfinder._internal.asgi import Receive, Scope
from wayfinder.http.cookies import parse_cookies
from wayfinder.http.headers import Headers
from wayfinder.http.query import QueryParams

if TYPE_CHECKING:
    from wayfinder.middleware.cors import CORSOptions
    from wayfinder.routing.route import Route


@dataclass(slots=True)
class Request:
    """An HTTP request as seen by handlers and middleware.

    A request is owned by exactly one dispatch task; nothing else holds
    a reference to it, so the routing fields are plain attributes.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    http_version: str
    scheme: str | None
    server: tuple[str, int] | None
    client: tuple[str, int] | None
    cookies: Mapping[str, str]

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Routing state
    params: dict[str, str] = field(default_factory=dict)
    data: dict[str, Any] | None = None
    lang: str = ""
    route: Route | None = None
    cors_options: CORSOptions | None = None

    # Private: body cache
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        """The Content-Length header as int."""
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "") or ""

    @property
    def referrer(self) -> str:
        return self.headers.get("referer", "") or ""

    @property
    def remote_address(self) -> str:
        """``host:port`` of the client, or an empty string if unknown."""
        if self.client is None:
            return ""
        return f"{self.client[0]}:{self.client[1]}"

    @property
    def url(self) -> str:
        """Request path plus query string."""
        qs = self.query._raw
        if qs:
            return f"{self.path}?{qs.decode('latin-1')}"
        return self.path

    def bearer_token(self) -> str | None:
        """Return the token of an ``Authorization: Bearer`` header."""
        header = self.headers.get("authorization", "") or ""
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None
        return token.strip()

    def basic_auth(self) -> tuple[str, str] | None:
        """Return ``(username, password)`` from an ``Authorization: Basic`` header."""
        header = self.headers.get("authorization", "") or ""
        scheme, _, encoded = header.partition(" ")
        if scheme.lower() != "basic":
            return None
        try:
            decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return None
        username, sep, password = decoded.partition(":")
        if not sep:
            return None
        return username, password

    def has(self, name: str) -> bool:
        """True if *name* is present in the parsed request data."""
        return self.data is not None and name in self.data

    def get_route(self) -> Route | None:
        """The route this request was dispatched to."""
        return self.route

    def get_cors_options(self) -> CORSOptions | None:
        """CORS options of the router that dispatched this request."""
        return self.cors_options

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached: the ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                break
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        import json as json_module

        raw = await self.body()
        return json_module.loads(raw)

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        raw = await self.body()
        return raw.decode("utf-8")

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        headers = Headers(tuple(scope.get("headers", ())))
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=headers,
            query=QueryParams(scope.get("query_string", b"")),
            http_version=scope.get("http_version", "1.1"),
            scheme=scope.get("scheme"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            cookies=parse_cookies(headers.get("cookie", "") or ""),
            _receive=receive,
        )
