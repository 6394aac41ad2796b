"""Controller base class.

Controllers group related handlers. A route names its owner type and a
method; the router builds a fresh controller for every dispatch through
the resolver, so constructor parameters are injected the same way
method parameters are::

    class UserController(Controller):
        def __init__(self, router: Router, users: UserRepository) -> None:
            super().__init__(router)
            self.users = users

        async def show(self, id: int) -> Template:
            return self.render("user", user=await self.users.get(id))

Subclasses without their own ``__init__`` get the router injected here.
"""

from roost.http.response import Redirect
from roost.routing.router import Router
from roost.templating.returns import Template


class Controller:
    """Base for handler owners: view rendering and redirects."""

    def __init__(self, router: Router) -> None:
        self.router = router

    def render(self, view: str, /, **data: object) -> Template:
        """Return the template ``<view>.html`` with *data* as its context.

        The router is always available to the view as ``router``, e.g.
        ``{{ router.url("/login") }}``.
        """
        return Template(f"{view}.html", **{**data, "router": self.router})

    def redirect(self, path: str, status: int = 302) -> Redirect:
        """Redirect to an internal *path*, honouring the mount point."""
        return Redirect(self.router.url(path), status=status)
