"""Shared type aliases used across roost modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Plain route function or bound controller method
Handler: TypeAlias = Callable[..., Any]

# Error handler: receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]

# Zero-argument factory registered through ``App.provide()``
Provider: TypeAlias = Callable[[], Any]
