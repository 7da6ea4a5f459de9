"""Resolve ``"module:attribute"`` strings to Router instances."""

import importlib

from wayfinder.routing.router import Router


def resolve_router(import_string: str) -> Router:
    """Resolve an import string to a root ``Router``.

    When the attribute is omitted it defaults to ``router``. A callable
    that is not a ``Router`` is treated as a factory and called.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a ``Router``.
    """
    module_path, _, attr_name = import_string.partition(":")
    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name or "router")

    if callable(obj) and not isinstance(obj, Router):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, Router):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a wayfinder.Router"
        raise TypeError(msg)
    return obj.root()
