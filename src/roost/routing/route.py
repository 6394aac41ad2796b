"""Route, HandlerRef, and RouteMatch frozen dataclasses."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from roost.errors import ConfigurationError
from roost.routing.params import compile_pattern, placeholder_names

type HandlerSpec = tuple[type, str] | Callable[..., Any]


@dataclass(frozen=True, slots=True)
class HandlerRef:
    """What a route calls: a method on an owner type, or a plain function.

    For ``(Owner, "method")`` the owner is built through the resolver on
    every dispatch and ``method`` is looked up on the fresh instance. A
    missing method is only discovered at dispatch time.
    """

    owner: type | None
    attr: str
    func: Callable[..., Any] | None = None

    @classmethod
    def from_spec(cls, spec: HandlerSpec) -> HandlerRef:
        match spec:
            case (type() as owner, str() as attr):
                return cls(owner=owner, attr=attr)
            case _ if callable(spec) and not isinstance(spec, tuple):
                return cls(owner=None, attr=getattr(spec, "__name__", repr(spec)), func=spec)
        msg = f"Route handler must be (OwnerType, 'method') or a callable, got {spec!r}"
        raise ConfigurationError(msg)

    @property
    def label(self) -> str:
        if self.owner is not None:
            return f"{self.owner.__qualname__}.{self.attr}"
        return getattr(self.func, "__qualname__", self.attr)


@dataclass(frozen=True, slots=True)
class Route:
    """A registered route. Immutable once created."""

    pattern: str
    handler: HandlerRef
    requires_auth: bool = False
    regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "regex", compile_pattern(self.pattern))

    @property
    def placeholders(self) -> tuple[str, ...]:
        return placeholder_names(self.pattern)

    def match(self, path: str) -> tuple[str, ...] | None:
        """Captured segments if *path* matches this route in full."""
        found = self.regex.fullmatch(path)
        if found is None:
            return None
        return found.groups()


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match.

    ``captures`` holds the raw placeholder values in pattern order.
    """

    route: Route
    captures: tuple[str, ...] = ()
