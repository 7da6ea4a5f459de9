"""Serve a router with pounce.

Pounce's ``run()`` takes an import string, but callers here hold a live
``Router``, so ``pounce.Server`` is driven directly with the ASGI callable.
"""

import logging

logger = logging.getLogger("wayfinder.server")


def run_server(
    app: object,
    host: str,
    port: int,
    *,
    workers: int = 1,
    reload: bool = False,
) -> None:
    """Start a pounce server for *app*.

    Args:
        app: ASGI callable, usually a root ``Router``.
        host: Bind host address.
        port: Bind port number.
        workers: Worker count.
        reload: Restart on source changes.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError as exc:
        msg = "Serving requires pounce. Install it with: pip install 'wayfinder[server]'"
        raise RuntimeError(msg) from exc

    config = ServerConfig(host=host, port=port, workers=workers, reload=reload)
    logger.info("Serving on %s:%d", host, port)
    Server(config, app).run()
