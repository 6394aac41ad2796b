"""``roost routes`` — list registered routes in match order."""

import argparse
import sys

from roost.cli._resolve import resolve_app


def run_routes(args: argparse.Namespace) -> None:
    """Print PATTERN, HANDLER, and AUTH for each route of ``args.app``.

    Rows come out in registration order, which is also match order: a
    pattern listed after an overlapping one is shadowed by it.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = app.routes
    if not routes:
        print("No routes registered.")
        return

    rows = [
        (route.pattern, route.handler.label, "yes" if route.requires_auth else "")
        for route in routes
    ]
    width_pattern = max(7, *(len(r[0]) for r in rows))
    width_handler = max(7, *(len(r[1]) for r in rows))

    fmt = f"{{:<{width_pattern}}}  {{:<{width_handler}}}  {{}}"
    print(fmt.format("PATTERN", "HANDLER", "AUTH"))
    print("-" * min(width_pattern + width_handler + 8, 80))
    for pattern, handler, auth in rows:
        print(fmt.format(pattern, handler, auth).rstrip())
