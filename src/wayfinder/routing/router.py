"""Hierarchical router with a composable middleware pipeline.

A ``Router`` holds middleware, routes and subrouters, forming a tree
rooted at the ASGI entry point. Matching descends the tree depth-first
(subrouters before routes, declaration order breaking ties). Dispatch
composes the middleware of every router from the root down to the
matched route, then the route's own middleware, around the handler.

Routes are registered during setup. The tree freezes on the first
request; registering afterwards raises ``ConfigurationError``.
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Iterator

from wayfinder._internal.asgi import Receive, Scope, Send
from wayfinder._internal.invoke import invoke
from wayfinder._internal.types import Handler, StatusHandler
from wayfinder.config import RouterConfig, base_url
from wayfinder.context import request_var, router_var
from wayfinder.errors import ConfigurationError
from wayfinder.http.request import Request
from wayfinder.http.response import Response
from wayfinder.middleware.builtin import (
    language_middleware,
    parse_request_middleware,
    recovery_middleware,
)
from wayfinder.middleware.cors import CORSOptions, cors_middleware
from wayfinder.middleware.protocol import Middleware, MiddlewareHolder
from wayfinder.middleware.static import static_handler
from wayfinder.routing.params import compile_pattern
from wayfinder.routing.route import METHOD_NOT_ALLOWED_ROUTE, NOT_FOUND_ROUTE, Route, RouteMatch
from wayfinder.server.errors import error_status_handler, panic_status_handler

logger = logging.getLogger("wayfinder.router")
server_logger = logging.getLogger("wayfinder.server")

# Status codes rendered by ``error_status_handler`` on a fresh root router.
_ERROR_STATUSES: tuple[int, ...] = (
    *range(400, 419),
    *range(420, 427),
    428,
    429,
    431,
    444,
    451,
    *range(501, 509),
    510,
    511,
)


def _normalize(uri: str) -> str:
    return "" if uri == "/" else uri


class Router(MiddlewareHolder):
    """A node of the router tree.

    Usage::

        router = Router(RouterConfig(protocol="https"))
        router.route("GET", "/hello", hello).name("hello")

        products = router.subrouter("/product")
        products.middleware(auth)
        products.route("GET", "/{id:[0-9]+}", show).name("product.show")

        router.run()

    A router created with ``Router()`` is a root: it starts with the
    recovery, request-parsing and language middleware and the default
    status handlers. Subrouters are created with ``subrouter()`` and
    inherit middleware dynamically, at dispatch time.

    Thread safety:
        The build phase is single-threaded. The freeze transition uses
        a Lock + double-check so exactly one task freezes the tree even
        if several workers receive their first request concurrently.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_parent",
        "config",
        "cors_options",
        "has_cors_middleware",
        "named_routes",
        "prefix",
        "prefix_regex",
        "routes",
        "status_handlers",
        "subrouters",
    )

    def __init__(
        self,
        config: RouterConfig | None = None,
        *,
        prefix: str = "",
        parent: Router | None = None,
    ) -> None:
        super().__init__()
        self.prefix = _normalize(prefix)
        self.prefix_regex: re.Pattern[str] = compile_pattern(self.prefix, ends=False)
        self.subrouters: list[Router] = []
        self.routes: list[Route] = []
        self._frozen = False
        self._freeze_lock = threading.Lock()

        if parent is None:
            self._parent: Router | None = None
            self.config = config or RouterConfig()
            self.config.validate()
            self.named_routes: dict[str, Route] = {}
            self.status_handlers: dict[int, StatusHandler] = {}
            self.cors_options: CORSOptions | None = None
            self.has_cors_middleware = False
            self.add_middleware(recovery_middleware, parse_request_middleware, language_middleware)
            self.status_handler(panic_status_handler, 500)
            self.status_handler(error_status_handler, *_ERROR_STATUSES)
        else:
            self._parent = parent
            self.config = parent.config
            self.named_routes = parent.named_routes
            self.status_handlers = dict(parent.status_handlers)
            self.cors_options = parent.cors_options
            self.has_cors_middleware = parent.has_cors_middleware

    def __repr__(self) -> str:
        return f"<Router prefix={self.prefix!r} routes={len(self.routes)} subrouters={len(self.subrouters)}>"

    # -- Tree navigation --

    def get_parent(self) -> Router | None:
        return self._parent

    def get_routes(self) -> list[Route]:
        return list(self.routes)

    def get_subrouters(self) -> list[Router]:
        return list(self.subrouters)

    def root(self) -> Router:
        router = self
        while (parent := router.get_parent()) is not None:
            router = parent
        return router

    def _full_prefix(self) -> str:
        prefixes: list[str] = []
        router: Router | None = self
        while router is not None:
            prefixes.append(router.prefix)
            router = router.get_parent()
        return "".join(reversed(prefixes))

    def walk(self) -> Iterator[Route]:
        """Yield every route of this subtree in matching order."""
        for router in self.subrouters:
            yield from router.walk()
        yield from self.routes

    # -- Registration --

    def route(self, methods: str, uri: str, handler: Handler, *middleware: Middleware) -> Route:
        """Register a route.

        Args:
            methods: One method or several separated by ``|`` (``"GET|POST"``).
            uri: URI pattern relative to this router's prefix. Use
                ``{name}`` or ``{name:regex}`` for parameters. A bare
                ``"/"`` serves the router's own prefix, or the site index
                when no prefix is mounted above it.
            handler: ``(response, request)`` callable, sync or async.
            middleware: Route-local middleware, run after the router middleware.
        """
        self._check_not_frozen()
        method_list = list(dict.fromkeys(m.strip().upper() for m in methods.split("|") if m.strip()))
        if not method_list:
            msg = f"Route {uri!r} must declare at least one HTTP method."
            raise ConfigurationError(msg)
        if self.cors_options is not None and "OPTIONS" not in method_list:
            method_list.append("OPTIONS")

        # Keep "/" when nothing is mounted above, so "GET /" still matches.
        if uri == "/" and self._full_prefix():
            uri = ""
        route = Route(method_list, uri, handler, list(middleware))
        route._attach(self)
        self.routes.append(route)
        logger.debug("Registered %s %r", "|".join(method_list), self.prefix + route.uri)
        return route

    def get(self, uri: str, handler: Handler, *middleware: Middleware) -> Route:
        return self.route("GET", uri, handler, *middleware)

    def post(self, uri: str, handler: Handler, *middleware: Middleware) -> Route:
        return self.route("POST", uri, handler, *middleware)

    def put(self, uri: str, handler: Handler, *middleware: Middleware) -> Route:
        return self.route("PUT", uri, handler, *middleware)

    def patch(self, uri: str, handler: Handler, *middleware: Middleware) -> Route:
        return self.route("PATCH", uri, handler, *middleware)

    def delete(self, uri: str, handler: Handler, *middleware: Middleware) -> Route:
        return self.route("DELETE", uri, handler, *middleware)

    def static(
        self,
        uri: str,
        directory: str,
        download: bool = False,
        *middleware: Middleware,
    ) -> Route:
        """Serve files from *directory* under *uri*.

        The remaining path is captured as the ``resource`` parameter.
        With ``download=True`` files are sent as attachments.
        """
        return self.route("GET", uri + "{resource:.*}", static_handler(directory, download), *middleware)

    def subrouter(self, prefix: str) -> Router:
        """Create a child router mounted at *prefix*.

        The child shares the named-route index, copies the current status
        handlers and CORS settings, and starts with no middleware of its
        own: this router's middleware still wraps every child request.
        """
        self._check_not_frozen()
        child = Router(prefix=prefix, parent=self)
        self.subrouters.append(child)
        return child

    def middleware(self, *middleware: Middleware) -> Router:
        """Append router-level middleware."""
        self._check_not_frozen()
        self.add_middleware(*middleware)
        return self

    def status_handler(self, handler: StatusHandler, *codes: int) -> None:
        """Use *handler* to render responses left empty with one of *codes*."""
        self._check_not_frozen()
        for code in codes:
            self.status_handlers[code] = handler

    def cors(self, options: CORSOptions) -> None:
        """Enable CORS on this router and its future subrouters and routes.

        The CORS middleware is injected only once. Every route registered
        afterwards also accepts ``OPTIONS``.
        """
        self._check_not_frozen()
        self.cors_options = options
        if not self.has_cors_middleware:
            self.add_middleware(cors_middleware)
            self.has_cors_middleware = True

    def _register_name(self, name: str, route: Route) -> None:
        self._check_not_frozen()
        existing = self.named_routes.get(name)
        if existing is not None:
            msg = f"Route name {name!r} is already used by {existing!r}."
            raise ConfigurationError(msg)
        self.named_routes[name] = route

    # -- Lookup --

    def get_route(self, name: str) -> Route | None:
        """Return the route registered as *name* anywhere in the tree."""
        return self.named_routes.get(name)

    def url_for(self, name: str, **params: str) -> str:
        """Build the path of the route registered as *name*."""
        route = self.get_route(name)
        if route is None:
            msg = f"No route named {name!r}."
            raise ConfigurationError(msg)
        return route.build_uri(**params)

    # -- Matching --

    def match(self, method: str, match: RouteMatch) -> bool:
        """Find the route for *method* and ``match.current_path``.

        Returns ``True`` when a route matched fully, or when only the
        method differed (``match.route`` is then the method-not-allowed
        sentinel). Returns ``False`` with the not-found sentinel otherwise.
        """
        found = self.prefix_regex.match(match.current_path)
        if found is None:
            return False

        match.trim_current_path(found.group(0))
        match.merge_parameters(found.groupdict())
        saved_path = match.current_path
        saved_params = dict(match.parameters)

        for router in self.subrouters:
            if router.match(method, match) and match.route is not METHOD_NOT_ALLOWED_ROUTE:
                return True
            match.current_path = saved_path
            match.parameters = dict(saved_params)

        for route in self.routes:
            if route.match(method, match):
                return True

        if match.method_mismatch:
            match.route = METHOD_NOT_ALLOWED_ROUTE
            return True
        match.route = NOT_FOUND_ROUTE
        return False

    # -- Dispatch --

    async def request_handler(
        self,
        match: RouteMatch,
        send: Send,
        scope: Scope,
        receive: Receive,
    ) -> None:
        """Run the matched route through its middleware chain and finalize."""
        route = match.route
        router = route.get_parent() or self

        response = Response(send, debug=self.config.debug)
        request = Request.from_asgi(scope, receive)
        request.params = match.parameters
        request.route = route
        request.cors_options = router.cors_options

        handler = router._compose(route)
        request_token = request_var.set(request)
        router_token = router_var.set(self.root())
        try:
            await invoke(handler, response, request)
            await router._finalize(response, request)
        finally:
            router_var.reset(router_token)
            request_var.reset(request_token)

    def _compose(self, route: Route) -> Handler:
        """Wrap the route handler in route, then router, middleware up to the root."""
        endpoint = route.handler

        async def terminal(response: Response, request: Request) -> None:
            await invoke(endpoint, response, request)

        handler = route.apply_middleware(terminal)
        router: Router | None = self
        while router is not None:
            handler = router.apply_middleware(handler)
            router = router.get_parent()
        return handler

    def _resolve_status_handler(self, status: int) -> StatusHandler | None:
        router: Router | None = self
        while router is not None:
            handler = router.status_handlers.get(status)
            if handler is not None:
                return handler
            router = router.get_parent()
        return None

    async def _finalize(self, response: Response, request: Request) -> None:
        """Render status-only responses, then write the header and close the body."""
        if response.is_empty() and not response.is_header_written():
            status = response.get_status()
            if status == 0:
                # Nothing written and no status set: 204 (RFC 9110, 15.3.5)
                response.status(204)
            else:
                handler = self._resolve_status_handler(status)
                if handler is None and status >= 400:
                    handler = error_status_handler
                if handler is not None:
                    await self._run_status_handler(handler, response, request)

        if not response.is_header_written():
            await response.write_header(response.get_status() or 200)
        await response.finish()

    async def _run_status_handler(
        self,
        handler: StatusHandler,
        response: Response,
        request: Request,
    ) -> None:
        try:
            await invoke(handler, response, request)
        except Exception:
            server_logger.exception("Status handler failed for %s %s", request.method, request.path)
            if not response.is_header_written():
                response.status(500)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Redirects to the configured protocol when the request came in on
        the other one, then matches and dispatches.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        self._ensure_frozen()

        scheme = scope.get("scheme")
        if scheme and scheme != self.config.protocol:
            await self._redirect_to_protocol(scope, send)
            return

        match = RouteMatch(current_path=scope["path"])
        self.match(scope["method"], match)
        logger.debug("%s %s matched %r", scope["method"], scope["path"], match.route)
        await self.request_handler(match, send, scope, receive)

    async def _redirect_to_protocol(self, scope: Scope, send: Send) -> None:
        request = Request.from_asgi(scope, _no_body)
        address = base_url(self.config) + request.path
        if request.query:
            address += "?" + request.query.encode()
        server_logger.debug("Redirecting %s request for %s to %s", scope.get("scheme"), request.path, address)

        response = Response(send, debug=self.config.debug)
        await response.redirect(address, 308)
        await response.finish()

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Freeze the tree at startup and acknowledge lifespan messages."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Lifecycle --

    def freeze(self) -> None:
        """End the build phase for the whole tree."""
        self.root()._ensure_frozen()

    def _ensure_frozen(self) -> None:
        root = self.root()
        if root._frozen:
            return
        with root._freeze_lock:
            if root._frozen:
                return
            root._frozen = True
            logger.debug("Router tree frozen with %d routes", sum(1 for _ in root.walk()))

    def _check_not_frozen(self) -> None:
        if self.root()._frozen:
            msg = (
                "Cannot modify the router after it has started serving requests. "
                "Register routes, middleware and status handlers before serving."
            )
            raise ConfigurationError(msg)

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve this router with pounce.

        Binds to ``config.host`` and ``config.port`` (``https_port`` when the
        protocol is https) unless overridden.
        """
        from wayfinder.server.dev import run_server

        self.freeze()
        default_port = self.config.https_port if self.config.protocol == "https" else self.config.port
        run_server(self, host or self.config.host, port or default_port)


async def _no_body() -> dict[str, object]:
    return {"type": "http.request", "body": b"", "more_body": False}


def new_router(config: RouterConfig | None = None) -> Router:
    """Create a root router with the built-in middleware and status handlers."""
    return Router(config)
