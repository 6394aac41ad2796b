"""``roost run`` — serve an app with uvicorn."""

import argparse
import sys

import uvicorn

from roost.cli._resolve import resolve_app


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it.

    With ``--reload`` uvicorn re-imports the app from the import string
    in a worker process, so the string itself is handed over.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    host = args.host or app.config.host
    port = args.port or app.config.port
    log_level = "debug" if app.config.debug else "info"

    if args.reload:
        uvicorn.run(args.app, host=host, port=port, reload=True, log_level=log_level)
    else:
        uvicorn.run(app, host=host, port=port, log_level=log_level)
