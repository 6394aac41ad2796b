"""Security audit events.

Opt-in event channel for authentication and authorization telemetry.
The auth gate emits ``auth.gate.denied``; the example portal emits
``auth.login.succeeded`` / ``auth.login.failed``. Nothing is delivered
until a sink is registered::

    from roost.security.audit import set_security_event_sink

    set_security_event_sink(lambda event: audit_log.info("%s", event))
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any


@dataclass(frozen=True, slots=True)
class SecurityEvent:
    """One structured security event."""

    name: str
    timestamp: float = field(default_factory=time)
    path: str | None = None
    method: str | None = None
    username: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


type SecurityEventSink = Callable[[SecurityEvent], None]


_sink_lock = threading.Lock()
_sink: SecurityEventSink | None = None


def set_security_event_sink(sink: SecurityEventSink | None) -> None:
    """Install the process-wide sink. ``None`` turns delivery off."""
    global _sink
    with _sink_lock:
        _sink = sink


def emit_security_event(
    name: str,
    *,
    request: Any | None = None,
    username: str | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Hand an event to the sink, if one is installed.

    *request* only contributes its ``path`` and ``method``.
    """
    with _sink_lock:
        sink = _sink
    if sink is None:
        return
    sink(
        SecurityEvent(
            name=name,
            path=getattr(request, "path", None),
            method=getattr(request, "method", None),
            username=username,
            details=details or {},
        )
    )
