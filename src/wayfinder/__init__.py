"""Wayfinder: a hierarchical HTTP router with a composable middleware pipeline.

Routes live in a tree of routers. Each router carries middleware and
status handlers that apply to everything mounted below it.

Basic usage::

    from wayfinder import Router

    router = Router()

    async def hello(response, request):
        await response.string(200, "Hello, World!")

    router.get("/hello", hello).name("hello")

    api = router.subrouter("/api")
    api.middleware(auth)
    api.get("/product/{id:[0-9]+}", show_product)

    router.run()
"""

__version__ = "0.1.0"
__all__ = [
    "CORSOptions",
    "ConfigurationError",
    "HTTPError",
    "Middleware",
    "MiddlewareHolder",
    "Next",
    "Request",
    "Response",
    "Route",
    "Router",
    "RouterConfig",
    "WayfinderError",
    "get_request",
    "get_route",
    "load_config",
    "new_router",
    "url_for",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wayfinder`` fast while providing a clean top-level API.
    """
    if name in ("Router", "new_router"):
        from wayfinder.routing import router as _router

        return getattr(_router, name)

    if name == "Route":
        from wayfinder.routing.route import Route

        return Route

    if name in ("RouterConfig", "load_config"):
        from wayfinder import config as _config

        return getattr(_config, name)

    if name == "Request":
        from wayfinder.http.request import Request

        return Request

    if name == "Response":
        from wayfinder.http.response import Response

        return Response

    if name == "CORSOptions":
        from wayfinder.middleware.cors import CORSOptions

        return CORSOptions

    if name in ("Middleware", "MiddlewareHolder", "Next"):
        from wayfinder.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("get_request", "get_route", "url_for"):
        from wayfinder import context as _ctx

        return getattr(_ctx, name)

    if name in ("WayfinderError", "ConfigurationError", "HTTPError"):
        from wayfinder import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
