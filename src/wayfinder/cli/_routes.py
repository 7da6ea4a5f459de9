"""``wayfinder routes``: print the route tree as a table."""

import argparse
import sys

from wayfinder.cli._resolve import resolve_router


def run_routes(args: argparse.Namespace) -> None:
    """Print METHODS, URI and NAME for every route, in matching order."""
    try:
        router = resolve_router(args.router)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    rows = [
        ("|".join(route.get_methods()), route.get_full_uri() or "/", route.get_name() or "")
        for route in router.walk()
    ]
    if not rows:
        print("No routes registered.")
        return

    width_methods = max(7, *(len(r[0]) for r in rows))
    width_uri = max(3, *(len(r[1]) for r in rows))
    fmt = f"{{:<{width_methods}}}  {{:<{width_uri}}}  {{}}"
    print(fmt.format("METHODS", "URI", "NAME").rstrip())
    print("-" * min(width_methods + width_uri + 8, 80))
    for methods, uri, name in rows:
        print(fmt.format(methods, uri, name).rstrip())
