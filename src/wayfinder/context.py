"""Request-scoped context.

Dispatch sets the current request and the serving root router in
ContextVars so code without direct access to them (helpers called from
handlers, template filters) can reach them. Each asyncio task gets its
own copy, so concurrent requests never see each other's values.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wayfinder.http.request import Request
    from wayfinder.routing.route import Route
    from wayfinder.routing.router import Router

request_var: ContextVar[Request] = ContextVar("wayfinder_request")
router_var: ContextVar[Router] = ContextVar("wayfinder_router")


def get_request() -> Request:
    """Return the request being dispatched.

    Raises ``LookupError`` outside a request.
    """
    return request_var.get()


def get_route(name: str) -> Route | None:
    """Look up a named route on the router serving the current request.

    Raises ``LookupError`` outside a request.
    """
    return router_var.get().get_route(name)


def url_for(name: str, **params: str) -> str:
    """Build the path of a named route from inside a request.

    Usage::

        response.headers.set("Location", url_for("product.show", id="5"))
    """
    return router_var.get().url_for(name, **params)
