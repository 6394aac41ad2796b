"""Roost exception hierarchy.

Shared across Router, Resolver, App, and middleware so every module
raises and catches the same types.
"""

from dataclasses import dataclass


class RoostError(Exception):
    """Base for all roost-specific errors."""


class ConfigurationError(RoostError):
    """Raised when app configuration is invalid.

    Typically raised while the app freezes or while middleware is built.
    """


class ResolutionError(RoostError):
    """Raised when a handler or one of its arguments cannot be produced.

    Covers unresolvable annotations, types that cannot be built without
    arguments, and path values that do not parse as the declared type.
    Never recovered inside the pipeline; the top-level handler answers 500.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(RoostError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, the auth gate, or handlers. The ASGI handler
    catches these and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched the request path."""

    def __init__(self, detail: str = "404 Not Found") -> None:
        super().__init__(status=404, detail=detail)


class Forbidden(HTTPError):  # noqa: N818
    """403 — the route requires a logged-in session."""

    def __init__(
        self, detail: str = "403 Forbidden: You must be logged in to access this page."
    ) -> None:
        super().__init__(status=403, detail=detail)
