"""Reflective dependency resolution for handlers and their owners.

Given a callable, a ``RequestContext`` and a positional value pool (the
route captures), produce the argument list. Each parameter is resolved
on its own, in this order:

1. no annotation                → its declared default, else ``None``
2. ``Router`` / ``Session``     → the current router / session
3. ``Request`` / ``RequestContext`` → the current request / context
4. a type registered with ``App.provide()`` → ``factory()``
5. a pool entry at a positional parameter's index → the value, coerced
   (``int`` must be all digits; anything else stays a string)
6. a declared default           → that default
7. otherwise                    → ``Type()`` with no arguments; a scalar
   (``int``, ``str``, ``float``, ``bool``) without a path value fails instead

Resolution is flat: a type built in step 7 gets no injection of its own.
Owner types are built with the same procedure and an empty pool.

Binding is positional: the n-th parameter (``self`` excluded) takes the
n-th capture, whatever the placeholder was called.
"""

from __future__ import annotations

import inspect
import re
import types
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin

from roost.errors import ResolutionError
from roost.http.request import Request

if TYPE_CHECKING:
    from roost.context import RequestContext
    from roost.routing.route import HandlerRef

_EMPTY = inspect.Parameter.empty
_INTEGER = re.compile(r"-?\d+")
_SCALARS = (int, str, float, bool)


@dataclass(frozen=True, slots=True)
class ParamSpec:
    """One declared parameter, read once per callable."""

    name: str
    index: int
    annotation: Any = None
    keyword_only: bool = False
    default: Any = _EMPTY

    @property
    def has_default(self) -> bool:
        return self.default is not _EMPTY


class Resolver:
    """Build handler owners and handler arguments.

    Usage::

        resolver = Resolver({Mailer: make_mailer})
        controller = resolver.construct(UserController, context)
        args, kwargs = resolver.arguments(controller.show, context, ("42",))
    """

    __slots__ = ("_providers", "_specs")

    def __init__(self, providers: Mapping[type, Callable[[], Any]] | None = None) -> None:
        # Shared with App.provide(), so registrations made later are seen.
        self._providers: Mapping[type, Callable[[], Any]] = (
            providers if providers is not None else {}
        )
        self._specs: dict[Any, tuple[ParamSpec, ...]] = {}

    # -- Declarations --

    def params(self, func: Callable[..., Any]) -> tuple[ParamSpec, ...]:
        """Parameter declarations of *func*, cached per underlying function.

        Bound methods are cached by their function, with ``self`` already
        excluded by ``inspect.signature``.
        """
        key = (getattr(func, "__func__", func), hasattr(func, "__self__"))
        specs = self._specs.get(key)
        if specs is None:
            specs = self._read_params(func)
            self._specs[key] = specs
        return specs

    @staticmethod
    def _read_params(func: Callable[..., Any]) -> tuple[ParamSpec, ...]:
        try:
            sig = inspect.signature(func, eval_str=True)
        except (NameError, TypeError, ValueError) as exc:
            name = getattr(func, "__qualname__", repr(func))
            msg = f"Cannot read the parameters of {name}: {exc}"
            raise ResolutionError(msg) from exc

        specs: list[ParamSpec] = []
        for index, param in enumerate(sig.parameters.values()):
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            annotation = None if param.annotation is _EMPTY else param.annotation
            specs.append(
                ParamSpec(
                    name=param.name,
                    index=index,
                    annotation=annotation,
                    keyword_only=param.kind is inspect.Parameter.KEYWORD_ONLY,
                    default=param.default,
                )
            )
        return tuple(specs)

    # -- Resolution --

    def resolve(self, param: ParamSpec, context: RequestContext, pool: Sequence[str]) -> Any:
        """Produce the value for one parameter."""
        annotation = param.annotation
        if annotation is None:
            return param.default if param.has_default else None

        target = _unwrap_optional(annotation)
        found, value = self._from_context(target, context)
        if found:
            return value

        if target in self._providers:
            return self._providers[target]()

        if not param.keyword_only and param.index < len(pool):
            return _coerce(param, target, pool[param.index])

        if param.has_default:
            return param.default

        if target in _SCALARS:
            msg = (
                f"No path value for parameter {param.name!r} ({target.__name__}) "
                f"at position {param.index}"
            )
            raise ResolutionError(msg)

        return _construct_plain(param, target)

    def _from_context(self, target: Any, context: RequestContext) -> tuple[bool, Any]:
        from roost.context import RequestContext
        from roost.routing.router import Router
        from roost.sessions.store import Session

        if not isinstance(target, type):
            return False, None
        if issubclass(target, Router):
            return True, context.router
        if issubclass(target, Session):
            if context.session is None:
                msg = "A Session was requested but the app has no database configured"
                raise ResolutionError(msg)
            return True, context.session
        if issubclass(target, Request):
            return True, context.request
        if issubclass(target, RequestContext):
            return True, context
        return False, None

    def arguments(
        self,
        func: Callable[..., Any],
        context: RequestContext,
        pool: Sequence[str] = (),
    ) -> tuple[list[Any], dict[str, Any]]:
        """Resolve every parameter of *func* into call arguments."""
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for param in self.params(func):
            value = self.resolve(param, context, pool)
            if param.keyword_only:
                kwargs[param.name] = value
            else:
                args.append(value)
        return args, kwargs

    def construct[T](self, owner: type[T], context: RequestContext) -> T:
        """Build *owner* by resolving its constructor with an empty pool."""
        if owner.__init__ is object.__init__:
            args: list[Any] = []
            kwargs: dict[str, Any] = {}
        else:
            args, kwargs = self.arguments(owner, context)
        try:
            return owner(*args, **kwargs)
        except (TypeError, ValueError) as exc:
            msg = f"Cannot construct {owner.__qualname__}: {exc}"
            raise ResolutionError(msg) from exc

    def build_target(self, handler: HandlerRef, context: RequestContext) -> Callable[..., Any]:
        """Return the callable a route invokes: a fresh bound method or a function."""
        if handler.owner is None:
            assert handler.func is not None
            return handler.func
        instance = self.construct(handler.owner, context)
        try:
            return getattr(instance, handler.attr)
        except AttributeError:
            msg = f"{handler.owner.__qualname__} has no handler method {handler.attr!r}"
            raise ResolutionError(msg) from None


def _unwrap_optional(annotation: Any) -> Any:
    """``int | None`` resolves like ``int``."""
    if get_origin(annotation) in (Union, types.UnionType):
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return members[0]
    return annotation


def _coerce(param: ParamSpec, target: Any, raw: str) -> Any:
    if target is int:
        if not _INTEGER.fullmatch(raw):
            msg = f"Path value {raw!r} for parameter {param.name!r} is not an integer"
            raise ResolutionError(msg)
        return int(raw)
    return raw


def _construct_plain(param: ParamSpec, target: Any) -> Any:
    if not callable(target):
        msg = f"Cannot resolve parameter {param.name!r}: {target!r} is not constructible"
        raise ResolutionError(msg)
    try:
        return target()
    except (TypeError, ValueError) as exc:
        name = getattr(target, "__qualname__", repr(target))
        msg = f"Cannot resolve parameter {param.name!r}: {name}() failed: {exc}"
        raise ResolutionError(msg) from exc
