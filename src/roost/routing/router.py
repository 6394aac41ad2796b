"""Ordered router with first-match dispatch.

Routes are kept in registration order and scanned linearly. The first
route whose pattern matches the whole path wins, however specific a
later route might be; a later duplicate of an earlier pattern is never
reached. The HTTP method is not part of the match.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from roost._internal.invoke import invoke
from roost.context import context_var
from roost.errors import NotFound
from roost.middleware.auth import AuthGate
from roost.routing.route import HandlerRef, HandlerSpec, Route, RouteMatch

if TYPE_CHECKING:
    from roost.context import RequestContext
    from roost.resolve import Resolver

logger = logging.getLogger("roost.routing")


class Router:
    """Route table plus the dispatch procedure.

    Usage::

        router = Router()
        router.add_route("/", (HomeController, "index"))
        router.add_route("/user/{id}", (UserController, "show"), requires_auth=True)
        match = router.match("/user/42")   # captures == ("42",)

    Dispatch for a matched route:

    1. if the route requires auth, the gate checks the session and raises
       ``Forbidden`` before anything is constructed;
    2. the owner type is built through the resolver (empty value pool);
    3. the method's arguments are resolved with the captures as the pool;
    4. the method is called and its return value handed back.
    """

    __slots__ = ("_frozen", "_gate", "_resolver", "_routes", "root_path")

    def __init__(
        self,
        *,
        resolver: Resolver | None = None,
        gate: AuthGate | None = None,
        root_path: str = "",
    ) -> None:
        if resolver is None:
            from roost.resolve import Resolver

            resolver = Resolver()
        self._resolver = resolver
        self._gate = gate or AuthGate()
        self._routes: list[Route] = []
        self._frozen = False
        self.root_path = root_path.rstrip("/")

    def __repr__(self) -> str:
        return f"<Router {len(self._routes)} routes>"

    # -- Registration --

    def add_route(
        self,
        pattern: str,
        handler: HandlerSpec,
        requires_auth: bool = False,
    ) -> Route:
        """Append a route to the table.

        Raises ``RuntimeError`` once the router is frozen.
        """
        if self._frozen:
            msg = "Cannot add routes after the app has started serving requests."
            raise RuntimeError(msg)
        route = Route(pattern, HandlerRef.from_spec(handler), requires_auth)
        self._routes.append(route)
        return route

    def freeze(self) -> None:
        self._frozen = True

    @property
    def routes(self) -> tuple[Route, ...]:
        """Registered routes in registration (and match) order."""
        return tuple(self._routes)

    @property
    def resolver(self) -> Resolver:
        return self._resolver

    # -- Matching --

    def match(self, path: str) -> RouteMatch:
        """Return the first route matching *path* in full.

        Raises ``NotFound`` when nothing matches.
        """
        for route in self._routes:
            captures = route.match(path)
            if captures is not None:
                return RouteMatch(route=route, captures=captures)
        raise NotFound()

    def url(self, path: str) -> str:
        """Build an internal link for *path*, honouring the mount point."""
        return f"{self.root_path}{path}"

    # -- Dispatch --

    async def dispatch(self, context: RequestContext) -> Any:
        """Match the request path and run the handler.

        The context carrying the captures is published on ``context_var``
        while the handler runs.

        Raises ``NotFound``, ``Forbidden``, or ``ResolutionError``; other
        exceptions raised by the handler propagate unchanged.
        """
        match = self.match(context.request.path)
        route = match.route
        context = replace(context, captures=match.captures)
        logger.debug("%s matched %s -> %s", context.request.path, route.pattern, route.handler.label)

        token = context_var.set(context)
        try:
            if route.requires_auth:
                self._gate.check(context.session, request=context.request)

            target = self._resolver.build_target(route.handler, context)
            args, kwargs = self._resolver.arguments(target, context, match.captures)
            return await invoke(target, *args, **kwargs)
        finally:
            context_var.reset(token)
