"""Built-in middleware installed on every root router.

Order on a fresh router: recovery, request parsing, language. Recovery
comes first so it wraps everything else, including user middleware.
"""

import json
import logging
from urllib.parse import parse_qs

from wayfinder._internal.types import Handler
from wayfinder.context import router_var
from wayfinder.errors import HTTPError
from wayfinder.http.query import flatten_multi
from wayfinder.http.request import Request
from wayfinder.http.response import Response
from wayfinder.lang import detect_language

logger = logging.getLogger("wayfinder.server")


def recovery_middleware(next: Handler) -> Handler:
    """Trap exceptions raised by the rest of the chain.

    ``HTTPError`` becomes its status and headers. Any other exception is
    logged, stored in ``response.err`` and turned into a 500; the
    status handlers render the body afterwards.
    """

    async def handler(response: Response, request: Request) -> None:
        try:
            await next(response, request)
        except HTTPError as exc:
            for name, value in exc.headers:
                response.headers.set(name, value)
            response.status(exc.status)
        except Exception as exc:
            logger.exception("Unhandled error in %s %s", request.method, request.path)
            response.err = exc
            response.status(500)

    return handler


def _media_type(request: Request) -> str:
    return (request.content_type or "").split(";", 1)[0].strip().lower()


def parse_request_middleware(next: Handler) -> Handler:
    """Fill ``request.data`` from the query string and the body.

    JSON object bodies and urlencoded forms are merged over the query
    parameters. A malformed JSON body leaves ``request.data`` as ``None``.
    Bodies larger than ``max_upload_size`` are rejected with 413.
    """

    async def handler(response: Response, request: Request) -> None:
        data = request.query.flat()
        media_type = _media_type(request)

        if media_type in ("application/json", "application/x-www-form-urlencoded"):
            limit = router_var.get().config.max_upload_size
            length = request.content_length
            if length is not None and length > limit:
                response.status(413)
                return
            body = await request.body()
            if len(body) > limit:
                response.status(413)
                return

            if media_type == "application/json":
                try:
                    payload = json.loads(body) if body else {}
                except (ValueError, UnicodeDecodeError):
                    data = None
                else:
                    if isinstance(payload, dict):
                        data.update(payload)
                    else:
                        data = None
            elif body:
                form = parse_qs(body.decode("utf-8", errors="replace"), keep_blank_values=True)
                data.update(flatten_multi(form))

        request.data = data
        await next(response, request)

    return handler


def language_middleware(next: Handler) -> Handler:
    """Set ``request.lang`` from ``Accept-Language``."""

    async def handler(response: Response, request: Request) -> None:
        config = router_var.get().config
        request.lang = detect_language(
            request.headers.get("accept-language"),
            config.languages,
            config.default_language,
        )
        await next(response, request)

    return handler
