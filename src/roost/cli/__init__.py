"""Roost CLI — route listing and the development server.

Entry point registered as ``roost`` in ``pyproject.toml``::

    [project.scripts]
    roost = "roost.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``roost`` command."""
    parser = argparse.ArgumentParser(
        prog="roost",
        description="Roost — ordered routing, injected handlers, database-backed sessions.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- roost routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes in match order")
    routes_parser.add_argument("app", help="Import string (e.g. portal.app:app)")

    # -- roost run --------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Serve the app with uvicorn")
    run_parser.add_argument("app", help="Import string (e.g. portal.app:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from roost.cli._routes import run_routes

        run_routes(args)
    elif args.command == "run":
        from roost.cli._run import run_server

        run_server(args)
