"""Wayfinder exception hierarchy.

Shared across Router, Route, middleware and handlers so every module
raises and catches the same types.
"""

from dataclasses import dataclass


class WayfinderError(Exception):
    """Base for all wayfinder-specific errors."""


class ConfigurationError(WayfinderError):
    """Raised when the router tree or its configuration is invalid.

    Duplicate route names, malformed URI patterns and late registration
    all surface as this error during the build phase. It never occurs
    while serving.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(WayfinderError):
    """An error that maps directly to an HTTP status code.

    Raised by handlers or middleware. The recovery middleware catches it
    and sets the status on the response without writing a body, so the
    status handlers render the final output.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)
