"""Middleware: the protocol, the holder and the built-in middleware."""

from wayfinder.middleware.protocol import Middleware, MiddlewareHolder, Next

__all__ = ["Middleware", "MiddlewareHolder", "Next"]
