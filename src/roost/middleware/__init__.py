"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in:
    AuthGate -- Login check for routes registered with ``requires_auth``
    SessionMiddleware -- Database-backed sessions keyed by a signed cookie
"""

from roost.middleware.auth import AuthGate
from roost.middleware.protocol import Middleware, Next
from roost.middleware.sessions import SessionConfig, SessionMiddleware, current_session

__all__ = [
    "AuthGate",
    "Middleware",
    "Next",
    "SessionConfig",
    "SessionMiddleware",
    "current_session",
]
