"""Middleware protocol and the ordered middleware holder.

A middleware is any callable that wraps a handler::

    def my_mw(next: Handler) -> Handler:
        async def handler(response: Response, request: Request) -> None:
            ...  # before
            await next(response, request)
            ...  # after
        return handler

No base class required. The wrapped ``next`` is always awaitable; the
terminal handler is adapted with ``invoke`` so it may be sync or async.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from wayfinder._internal.types import Handler

if TYPE_CHECKING:
    from wayfinder.http.request import Request
    from wayfinder.http.response import Response


class Middleware(Protocol):
    """Protocol for wayfinder middleware.

    Accepts both functions and callable objects::

        # Function middleware
        def timing(next):
            async def handler(response, request):
                start = time.monotonic()
                await next(response, request)
                logger.info("%s took %.3fs", request.path, time.monotonic() - start)
            return handler

        # Class middleware
        class Tagger:
            def __call__(self, next):
                ...
    """

    def __call__(self, next: Handler, /) -> Handler: ...


class Next(Protocol):
    """Shape of the handler a middleware receives and returns."""

    async def __call__(self, response: Response, request: Request, /) -> None: ...


class MiddlewareHolder:
    """An ordered sequence of middleware.

    ``apply_middleware`` folds from the last element towards the first,
    so the first registered middleware is the outermost and runs first.
    """

    __slots__ = ("_middleware",)

    def __init__(self, middleware: list[Middleware] | None = None) -> None:
        self._middleware: list[Middleware] = list(middleware or [])

    def add_middleware(self, *middleware: Middleware) -> None:
        self._middleware.extend(middleware)

    def get_middleware(self) -> tuple[Middleware, ...]:
        return tuple(self._middleware)

    def apply_middleware(self, handler: Handler) -> Handler:
        """Wrap *handler* so the middleware run in registration order."""
        for mw in reversed(self._middleware):
            handler = mw(handler)
        return handler
