"""ASGI handler — translates ASGI scope/messages to roost types.

The only component that touches raw ASGI directly. Converts scope dicts
to typed Request objects, dispatches through middleware and routing,
and sends the Response back through ASGI send().
"""

from collections.abc import Callable
from contextvars import Token
from typing import Any

from kida import Environment

from roost._internal.asgi import Receive, Scope, Send
from roost.context import RequestContext, context_var, request_var
from roost.data.database import Database, _db_var
from roost.errors import HTTPError
from roost.http.request import Request
from roost.middleware.protocol import AnyResponse, Next
from roost.middleware.sessions import current_session
from roost.routing.router import Router
from roost.server.errors import handle_http_error, handle_internal_error
from roost.server.negotiation import negotiate
from roost.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: dict[int | type, Callable[..., Any]],
    kida_env: Environment | None = None,
    debug: bool,
    db: Database | None = None,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    token: Token[Request] = request_var.set(request)

    # Lifespan sets the database var only in its own task
    db_token: Token[Database] | None = None
    if db is not None:
        db_token = _db_var.set(db)

    try:
        # Innermost handler: build the dispatch context and run the router
        async def dispatch(req: Request) -> AnyResponse:
            context = RequestContext(request=req, router=router, session=current_session())
            ctx_token = context_var.set(context)
            try:
                result = await router.dispatch(context)
            finally:
                context_var.reset(ctx_token)
            return negotiate(result, kida_env=kida_env)

        # Wrap middleware around the dispatch
        handler: Next = dispatch
        for mw in reversed(middleware):
            outer = handler

            async def make_next(req: Request, _mw: Any = mw, _next: Next = outer) -> AnyResponse:
                return await _mw(req, _next)

            handler = make_next

        response = await handler(request)

    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, kida_env)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, kida_env, debug)
    finally:
        if db_token is not None:
            _db_var.reset(db_token)
        request_var.reset(token)

    await send_response(response, send)
