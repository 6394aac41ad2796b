"""Error handling pipeline for roost requests.

Maps HTTPError exceptions and unexpected failures to appropriate
Response objects, using registered error handlers or plain defaults.
"""

import html
import inspect
import logging
import traceback
from collections.abc import Callable
from typing import Any

from kida import Environment

from roost._internal.invoke import invoke
from roost.errors import HTTPError
from roost.http.request import Request
from roost.http.response import Response
from roost.server.negotiation import negotiate

logger = logging.getLogger("roost.server")


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    kida_env: Environment | None,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    Supports both sync and async error handlers.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = await invoke(handler, request, exc)
    elif len(params) == 1:
        result = await invoke(handler, request)
    else:
        result = await invoke(handler)

    return negotiate(result, kida_env=kida_env)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    kida_env: Environment | None,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers.

    Without a handler the body is the error's detail as plain text, e.g.
    ``404 Not Found``.
    """
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    # Exact exception type first, then status code
    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc, kida_env)
        # Keep the error status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    response = Response(
        body=exc.detail or f"Error {exc.status}",
        status=exc.status,
        content_type="text/plain; charset=utf-8",
    )
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    kida_env: Environment | None,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions (resolution failures included) as 500s."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(type(exc)) or error_handlers.get(500)
    if handler is not None:
        response = await call_error_handler(handler, request, exc, kida_env)
        return response.with_status(500) if response.status == 200 else response

    if debug:
        trace = "".join(traceback.format_exception(exc))
        body = f"<h1>500 Internal Server Error</h1>\n<pre>{html.escape(trace)}</pre>"
        return Response(body=body, status=500)

    return Response(
        body="Internal Server Error",
        status=500,
        content_type="text/plain; charset=utf-8",
    )
