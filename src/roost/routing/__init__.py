"""Routing — an ordered route table scanned first-match-wins.

Routes are registered during setup and the table is frozen when the
app starts serving.
"""

from roost.routing.route import HandlerRef, Route, RouteMatch
from roost.routing.router import Router

__all__ = ["HandlerRef", "Route", "RouteMatch", "Router"]
