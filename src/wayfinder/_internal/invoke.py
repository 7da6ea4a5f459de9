"""Invoke helpers: call sync or async handlers uniformly.

Wayfinder handlers can be ``def`` or ``async def``. Any code that calls
a user-provided handler must handle both cases. This module provides
a single helper so the sync/async check lives in exactly one place.

Usage::

    from wayfinder._internal.invoke import invoke

    await invoke(handler, response, request)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's a coroutine.

    Works with both sync and async callables::

        # sync: writes nothing, only sets a status
        def gone(response, request):
            response.status(410)

        # async: awaits the write
        async def hello(response, request):
            await response.string(200, "Hello")
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
