"""Writer-style HTTP response.

A ``Response`` wraps the ASGI ``send`` callable. Handlers either write a
body (``string``, ``json``, ``file``...) or only record a status with
``status(code)`` and leave the body to the router's status handlers.

Two phases:

1. While the chain runs, headers are mutable and nothing is sent until
   the first write. ``status()`` latches the most recent code.
2. After the chain, the router finalizes: it may run a status handler,
   writes the header if it was never written and closes the body stream.
"""

from __future__ import annotations

import json as json_module
import logging
import mimetypes
import os
from http import HTTPStatus
from pathlib import Path
from typing import Any

import anyio

from wayfinder._internal.asgi import Send
from wayfinder.http.cookies import SetCookie
from wayfinder.http.headers import ResponseHeaders

logger = logging.getLogger("wayfinder.server")

_CHUNK_SIZE = 64 * 1024


def status_text(code: int) -> str:
    """Standard reason phrase for *code*, or an empty string if unknown."""
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


class Response:
    """Per-request response writer.

    Attributes:
        headers: Mutable response headers, encoded when the header is written.
        err: Exception recovered from the handler chain, if any.
    """

    __slots__ = ("_closed", "_send", "_status", "debug", "empty", "err", "headers", "wrote_header")

    def __init__(self, send: Send, *, debug: bool = False) -> None:
        self._send = send
        self._status = 0
        self._closed = False
        self.headers = ResponseHeaders()
        self.empty = True
        self.wrote_header = False
        self.err: BaseException | None = None
        self.debug = debug

    # -- State --

    def status(self, code: int) -> None:
        """Set the status without writing anything.

        Successive calls latch the most recent code. Ignored once the
        header has been written, so ``get_status()`` reports what was sent.
        """
        if self.wrote_header:
            logger.debug("status(%d) after the header was written ignored", code)
            return
        self._status = int(code)

    def get_status(self) -> int:
        """The current status, 0 if none was set."""
        return self._status

    def get_error(self) -> BaseException | None:
        return self.err

    def is_empty(self) -> bool:
        """True until a body byte has been written."""
        return self.empty

    def is_header_written(self) -> bool:
        return self.wrote_header

    # -- Low-level writing --

    async def write_header(self, code: int) -> None:
        """Send the status line and headers. Only the first call has an effect."""
        if self.wrote_header:
            logger.debug("Superfluous write_header(%d) ignored", code)
            return
        code = int(code)
        self._status = code
        self.wrote_header = True
        await self._send(
            {
                "type": "http.response.start",
                "status": code,
                "headers": self.headers.raw(),
            }
        )

    async def write(self, data: bytes | str) -> int:
        """Write a body chunk, writing the header first if needed.

        Returns the number of bytes accepted.
        """
        if not self.wrote_header:
            await self.write_header(self._status or 200)
        chunk = data.encode("utf-8") if isinstance(data, str) else data
        if not chunk:
            return 0
        self.empty = False
        if not _body_allowed(self._status):
            return 0
        await self._send({"type": "http.response.body", "body": chunk, "more_body": True})
        return len(chunk)

    async def finish(self) -> None:
        """Close the body stream. Safe to call more than once."""
        if self._closed:
            return
        if not self.wrote_header:
            await self.write_header(self._status or 200)
        self._closed = True
        await self._send({"type": "http.response.body", "body": b"", "more_body": False})

    # -- Body helpers --

    async def string(self, code: int, text: str) -> None:
        """Write *text* with the given status."""
        if "content-type" not in self.headers:
            self.headers.set("Content-Type", "text/plain; charset=utf-8")
        await self.write_header(code)
        await self.write(text)

    async def json(self, code: int, data: Any) -> None:
        """Write *data* as JSON, followed by a newline."""
        self.headers.set("Content-Type", "application/json")
        body = json_module.dumps(data, separators=(",", ":"), ensure_ascii=False) + "\n"
        await self.write_header(code)
        await self.write(body)

    async def file(self, path: str | os.PathLike[str]) -> None:
        """Stream a file inline. Sets status 404 and raises if it is missing."""
        await self._write_file(Path(path), "inline")

    async def download(self, path: str | os.PathLike[str], filename: str) -> None:
        """Stream a file as an attachment named *filename*."""
        await self._write_file(Path(path), f'attachment; filename="{filename}"')

    async def redirect(self, url: str, code: int = HTTPStatus.PERMANENT_REDIRECT) -> None:
        """Redirect to *url* with a short HTML body."""
        self.headers.set("Location", url)
        self.headers.set("Content-Type", "text/html; charset=utf-8")
        await self.write_header(code)
        await self.write(f'<a href="{url}">{status_text(code)}</a>.\n\n')

    def cookie(self, name: str, value: str, **attributes: Any) -> None:
        """Add a ``Set-Cookie`` header. Must be called before the first write."""
        self.headers.add("Set-Cookie", SetCookie(name, value, **attributes).to_header_value())

    async def error(self, exc: BaseException) -> None:
        """Report a recovered error.

        In debug mode its message is written as the JSON error envelope,
        otherwise only status 500 is set so the regular status handler
        renders the body. Logging is left to the recovery middleware.
        """
        self.err = exc
        if self.debug and not self.wrote_header:
            await self.json(HTTPStatus.INTERNAL_SERVER_ERROR, {"error": str(exc)})
        else:
            self.status(HTTPStatus.INTERNAL_SERVER_ERROR)

    # -- Internal --

    async def _write_file(self, path: Path, disposition: str) -> None:
        if not await anyio.Path(path).is_file():
            self.status(HTTPStatus.NOT_FOUND)
            msg = f"No such file: {str(path)!r}"
            raise FileNotFoundError(msg)

        stat = await anyio.Path(path).stat()
        if "content-type" not in self.headers:
            content_type, _ = mimetypes.guess_type(path.name)
            self.headers.set("Content-Type", content_type or "application/octet-stream")
        self.headers.set("Content-Disposition", disposition)
        self.headers.set("Content-Length", str(stat.st_size))

        await self.write_header(HTTPStatus.OK)
        async with await anyio.open_file(path, "rb") as f:
            while chunk := await f.read(_CHUNK_SIZE):
                await self.write(chunk)
        # Zero-length files still count as a written body.
        self.empty = False
