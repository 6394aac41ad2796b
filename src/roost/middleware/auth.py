"""Auth gate: the access check for routes registered with ``requires_auth``.

The gate is a predicate over the session store. It does not load users,
does not know about passwords, and holds no state between requests::

    gate = AuthGate()
    gate.check(session, request=request)   # raises Forbidden when logged out

The router calls it after matching and before the handler's owner is
built, so a denied request never instantiates a controller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from roost.errors import Forbidden
from roost.security.audit import emit_security_event

if TYPE_CHECKING:
    from roost.sessions.store import Session


class AuthGate:
    """Deny requests whose session carries no identity."""

    __slots__ = ()

    def allows(self, session: Session | None) -> bool:
        return session is not None and session.is_logged_in()

    def check(self, session: Session | None, *, request: Any | None = None) -> None:
        """Raise ``Forbidden`` unless *session* is logged in.

        Apps without a database have no session at all; their protected
        routes are always denied.
        """
        if self.allows(session):
            return
        emit_security_event(
            "auth.gate.denied",
            request=request,
            details={"has_session": session is not None},
        )
        raise Forbidden()
