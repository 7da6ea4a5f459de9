"""``wayfinder run``: serve a router."""

import argparse
import sys

from wayfinder.cli._resolve import resolve_router


def run_router(args: argparse.Namespace) -> None:
    try:
        router = resolve_router(args.router)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    router.run(host=args.host, port=args.port)
