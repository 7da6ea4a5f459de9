"""Default status handlers.

Status handlers run after the middleware chain when a response carries
a status but no body. Registered on every root router: ``panic_status_handler``
for 500, ``error_status_handler`` for the other error statuses.
"""

from wayfinder.http.request import Request
from wayfinder.http.response import Response, status_text


async def error_status_handler(response: Response, request: Request) -> None:
    """Render the JSON error envelope: ``{"error":"Not Found"}``."""
    status = response.get_status() or 500
    await response.json(status, {"error": status_text(status)})


async def panic_status_handler(response: Response, request: Request) -> None:
    """Render a recovered error.

    In debug mode the error message becomes the envelope; otherwise the
    standard 500 envelope hides it.
    """
    err = response.get_error()
    if err is not None:
        await response.error(err)
    if response.is_empty() and not response.is_header_written():
        await error_status_handler(response, request)
