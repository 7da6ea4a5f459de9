"""CORS options and middleware.

``Router.cors(options)`` stores a ``CORSOptions`` on the router and
injects ``cors_middleware`` once. The middleware reads the options the
dispatching router attached to the request, so subrouters may override
them.
"""

from __future__ import annotations

from dataclasses import dataclass

from wayfinder._internal.types import Handler
from wayfinder.http.headers import Headers, ResponseHeaders
from wayfinder.http.request import Request
from wayfinder.http.response import Response


@dataclass(frozen=True, slots=True)
class CORSOptions:
    """CORS configuration.

    Fields default to allowing nothing. ``CORSOptions.default()`` returns
    a permissive set suited to public APIs::

        router.cors(CORSOptions.default())
        router.cors(CORSOptions(
            allowed_origins=("https://example.com",),
            allowed_methods=("GET", "POST"),
            allow_credentials=True,
        ))
    """

    allowed_origins: tuple[str, ...] = ()
    allowed_methods: tuple[str, ...] = ()
    allowed_headers: tuple[str, ...] = ()
    exposed_headers: tuple[str, ...] = ()
    max_age: int = 0  # seconds
    allow_credentials: bool = False
    options_passthrough: bool = False

    @classmethod
    def default(cls) -> CORSOptions:
        return cls(
            allowed_origins=("*",),
            allowed_methods=("HEAD", "GET", "POST", "PUT", "PATCH", "DELETE"),
            allowed_headers=("Origin", "Accept", "Content-Type", "X-Requested-With"),
            max_age=12 * 60 * 60,
        )

    def is_allowed_origin(self, origin: str) -> bool:
        return "*" in self.allowed_origins or origin in self.allowed_origins

    def configure_common(self, headers: ResponseHeaders, request_headers: Headers) -> None:
        """Set the headers shared by preflight and actual responses."""
        origin = request_headers.get("origin", "") or ""
        if "*" in self.allowed_origins and not self.allow_credentials:
            headers.set("Access-Control-Allow-Origin", "*")
        elif origin and self.is_allowed_origin(origin):
            headers.set("Access-Control-Allow-Origin", origin)
            headers.add("Vary", "Origin")

        if self.allow_credentials:
            headers.set("Access-Control-Allow-Credentials", "true")
        if self.exposed_headers:
            headers.set("Access-Control-Expose-Headers", ", ".join(self.exposed_headers))

    def handle_preflight(self, headers: ResponseHeaders, request_headers: Headers) -> None:
        """Set the preflight-only headers."""
        self.configure_common(headers, request_headers)
        if self.allowed_methods:
            headers.set("Access-Control-Allow-Methods", ", ".join(self.allowed_methods))

        requested = request_headers.get("access-control-request-headers", "") or ""
        if self.allowed_headers:
            headers.set("Access-Control-Allow-Headers", ", ".join(self.allowed_headers))
        elif requested:
            # No explicit list: reflect what the browser asked for.
            headers.set("Access-Control-Allow-Headers", requested)
        if self.max_age > 0:
            headers.set("Access-Control-Max-Age", str(self.max_age))


def is_preflight(request: Request) -> bool:
    return request.method == "OPTIONS" and "access-control-request-method" in request.headers


def cors_middleware(next: Handler) -> Handler:
    """Apply the request's CORS options.

    Preflight requests are answered with 204 and never reach the route
    handler, unless ``options_passthrough`` is set.
    """

    async def handler(response: Response, request: Request) -> None:
        options = request.cors_options
        if options is None:
            await next(response, request)
            return

        if is_preflight(request):
            options.handle_preflight(response.headers, request.headers)
            if not options.options_passthrough:
                response.status(204)
                return
        else:
            options.configure_common(response.headers, request.headers)
        await next(response, request)

    return handler
