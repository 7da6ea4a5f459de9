"""Static file handler.

``Router.static()`` registers a route whose trailing ``resource``
parameter names a file under a root directory. The handler built here
resolves that file and streams it, inline or as a download.

A missing file only sets status 404; the router's status handlers
render the body.
"""

import logging
import os
from pathlib import Path

from wayfinder._internal.types import Handler
from wayfinder.http.request import Request
from wayfinder.http.response import Response

logger = logging.getLogger("wayfinder.static")

_INDEX = "index.html"


def clean_static_path(directory: str, resource: str) -> str:
    """Join *resource* to *directory*, resolving directories to their index.

    Examples::

        clean_static_path("config", "")             -> "config/index.html"
        clean_static_path("resources", "/img/logo") -> "resources/img/logo/index.html"
    """
    if resource.startswith("/"):
        resource = resource[1:]
    file = directory if directory.endswith("/") else directory + "/"
    file += resource
    if os.path.isdir(file):
        if not file.endswith("/"):
            file += "/"
        file += _INDEX
    return file


def _within(directory: str, file: str) -> bool:
    """Whether *file* stays inside *directory* once symlinks are resolved."""
    return Path(file).resolve().is_relative_to(Path(directory).resolve())


def static_handler(directory: str, download: bool) -> Handler:
    """Build a handler serving files of *directory*.

    Usage::

        router.route("GET", "/assets{resource:.*}", static_handler("public", False))
    """

    async def handler(response: Response, request: Request) -> None:
        file = clean_static_path(directory, request.params.get("resource", ""))
        if not _within(directory, file) or not os.path.isfile(file):
            logger.debug("Static file %r not found", file)
            response.status(404)
            return

        try:
            if download:
                await response.download(file, os.path.basename(file))
            else:
                await response.file(file)
        except FileNotFoundError:
            # Removed between the check and the open.
            logger.warning("Static file %r disappeared before it could be served", file)

    return handler
