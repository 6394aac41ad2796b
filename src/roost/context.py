"""Request-scoped context.

``RequestContext`` is the explicit object threaded through dispatch: the
router, the resolver and the auth gate all receive it as an argument.
The same object is also published through ``context_var`` so template
helpers and repositories can reach the current request without having
it passed down.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    free-threading. No locks needed.
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING

from roost.http.request import Request

if TYPE_CHECKING:
    from roost.routing.router import Router
    from roost.sessions.store import Session


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Everything dispatch needs for one request.

    ``session`` is ``None`` only for apps without a database; ``captures``
    is filled in by the router once a route matched.
    """

    request: Request
    router: Router
    session: Session | None = None
    captures: tuple[str, ...] = ()


# -- Context vars --

request_var: ContextVar[Request] = ContextVar("roost_request")
"""The current request. Set by the ASGI handler before dispatch."""

context_var: ContextVar[RequestContext] = ContextVar("roost_context")
"""The current dispatch context. Set right before the router runs."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


def get_context() -> RequestContext:
    """Return the current dispatch context.

    Raises ``LookupError`` outside of dispatch.
    """
    return context_var.get()


def get_session() -> Session:
    """Return the session bound to the current request.

    Raises ``LookupError`` outside of dispatch or when the app has no
    session store.
    """
    session = context_var.get().session
    if session is None:
        msg = "No session is bound to the current request (the app has no database)"
        raise LookupError(msg)
    return session
