"""Route, RouteMatch and the sentinel routes.

A ``Route`` binds a method set and a URI pattern to a handler, plus
route-local middleware. It belongs to exactly one ``Router``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from wayfinder._internal.types import Handler
from wayfinder.config import base_url
from wayfinder.errors import ConfigurationError
from wayfinder.middleware.protocol import Middleware, MiddlewareHolder
from wayfinder.routing.params import compile_pattern, substitute

if TYPE_CHECKING:
    from wayfinder.http.request import Request
    from wayfinder.http.response import Response
    from wayfinder.routing.router import Router


class Route(MiddlewareHolder):
    """A registered route.

    Created by ``Router.route()``; not meant to be built directly.
    """

    __slots__ = ("_name", "_parent", "compiled", "handler", "methods", "uri")

    def __init__(
        self,
        methods: list[str],
        uri: str,
        handler: Handler,
        middleware: list[Middleware] | None = None,
    ) -> None:
        super().__init__(middleware)
        self.methods = methods
        self.uri = uri
        self.handler = handler
        self.compiled: re.Pattern[str] = compile_pattern(uri, ends=True)
        self._name: str | None = None
        self._parent: Router | None = None

    def __repr__(self) -> str:
        methods = "|".join(self.methods)
        name = f" name={self._name!r}" if self._name else ""
        return f"<Route {methods} {self.uri!r}{name}>"

    # -- Tree wiring --

    def _attach(self, parent: Router) -> None:
        if self._parent is not None:
            msg = f"{self!r} is already attached to a router."
            raise ConfigurationError(msg)
        self._parent = parent

    def get_parent(self) -> Router | None:
        return self._parent

    # -- Naming --

    def name(self, name: str) -> Route:
        """Register this route under *name* in the tree-wide index.

        Names are unique across the whole router tree and cannot be
        changed once set.
        """
        if self._name is not None:
            msg = f"{self!r} is already named {self._name!r}."
            raise ConfigurationError(msg)
        parent = self.get_parent()
        if parent is None:
            msg = f"Cannot name {self!r}: it is not attached to a router."
            raise ConfigurationError(msg)
        parent._register_name(name, self)
        self._name = name
        return self

    def get_name(self) -> str | None:
        return self._name

    # -- Introspection --

    def get_uri(self) -> str:
        return self.uri

    def get_methods(self) -> list[str]:
        return list(self.methods)

    def middleware(self, *middleware: Middleware) -> Route:
        """Append route-local middleware, run after every router middleware."""
        self.add_middleware(*middleware)
        return self

    def get_full_uri(self) -> str:
        """The URI pattern including every parent router prefix."""
        prefixes: list[str] = []
        router = self.get_parent()
        while router is not None:
            prefixes.append(router.prefix)
            router = router.get_parent()
        return "".join(reversed(prefixes)) + self.uri

    def build_uri(self, **params: str) -> str:
        """Build the path of this route, filling in its placeholders.

        Usage::

            route.build_uri(id="5")  # "/product/5"
        """
        return substitute(self.get_full_uri(), params) or "/"

    def build_url(self, **params: str) -> str:
        """Build the absolute URL of this route from the router config."""
        parent = self.get_parent()
        if parent is None:
            msg = f"Cannot build a URL for {self!r}: it is not attached to a router."
            raise ConfigurationError(msg)
        return base_url(parent.config) + self.build_uri(**params)

    # -- Matching --

    def match(self, method: str, match: RouteMatch) -> bool:
        """Test this route against ``match.current_path`` and *method*.

        On a full match the route and its captured parameters are stored
        in *match*. When only the path matches, *match* records the
        method mismatch and the search goes on.
        """
        found = self.compiled.match(match.current_path)
        if found is None:
            return False
        if method not in self.methods:
            match.method_mismatch = True
            match.route = METHOD_NOT_ALLOWED_ROUTE
            return False
        match.merge_parameters(found.groupdict())
        match.route = self
        return True


def _not_found(response: Response, request: Request) -> None:
    response.status(404)


def _method_not_allowed(response: Response, request: Request) -> None:
    response.status(405)


# Process-wide sentinels. Never attached to a router and never matched.
NOT_FOUND_ROUTE = Route([], "", _not_found)
METHOD_NOT_ALLOWED_ROUTE = Route([], "", _method_not_allowed)


@dataclass(slots=True)
class RouteMatch:
    """Mutable record of one routing attempt."""

    route: Route = NOT_FOUND_ROUTE
    current_path: str = ""
    parameters: dict[str, str] = field(default_factory=dict)
    method_mismatch: bool = False

    def trim_current_path(self, prefix: str) -> None:
        """Remove a leading *prefix* from ``current_path``."""
        if self.current_path.startswith(prefix):
            self.current_path = self.current_path[len(prefix) :]

    def merge_parameters(self, params: dict[str, str]) -> None:
        self.parameters.update(params)
