"""Roost — a minimal ASGI runtime.

Ordered routing, type-driven handler injection, and database-backed
sessions with a login gate.

Basic usage::

    from roost import App, AppConfig, Controller, Session

    class HomeController(Controller):
        def index(self, session: Session):
            return self.render("home", username=session.username)

    app = App(AppConfig(secret_key="change-me"), db="sqlite:///app.db")
    app.add_route("/", (HomeController, "index"))
    app.add_route("/user/{id}", (UserController, "show"), requires_auth=True)

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "AnyResponse",
    "App",
    "AppConfig",
    "ConfigurationError",
    "Controller",
    "Database",
    "Forbidden",
    "HTTPError",
    "Middleware",
    "Next",
    "NotFound",
    "Redirect",
    "Request",
    "RequestContext",
    "ResolutionError",
    "Response",
    "RoostError",
    "Router",
    "Session",
    "Template",
    "get_context",
    "get_request",
    "get_session",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import roost`` fast while providing a clean top-level API.
    """
    if name == "App":
        from roost.app import App

        return App

    if name == "AppConfig":
        from roost.config import AppConfig

        return AppConfig

    if name == "Controller":
        from roost.controller import Controller

        return Controller

    if name == "Database":
        from roost.data.database import Database

        return Database

    if name == "Request":
        from roost.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from roost.http import response as _resp

        return getattr(_resp, name)

    if name == "Router":
        from roost.routing.router import Router

        return Router

    if name == "Session":
        from roost.sessions.store import Session

        return Session

    if name == "Template":
        from roost.templating.returns import Template

        return Template

    if name in ("AnyResponse", "Middleware", "Next"):
        from roost.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("RequestContext", "get_context", "get_request", "get_session"):
        from roost import context as _ctx

        return getattr(_ctx, name)

    if name in (
        "ConfigurationError",
        "Forbidden",
        "HTTPError",
        "NotFound",
        "ResolutionError",
        "RoostError",
    ):
        from roost import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
