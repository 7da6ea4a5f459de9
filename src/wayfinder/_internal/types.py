"""Shared type aliases used across wayfinder modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: ``(response, request)``, sync or async
Handler: TypeAlias = Callable[..., Any]

# Middleware: wraps a handler and returns the wrapped handler
Middleware: TypeAlias = Callable[[Handler], Handler]

# Status handler: same shape as a route handler, runs after the chain
StatusHandler: TypeAlias = Handler
