"""Typed session payload and persisted record types."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger("roost.sessions")

IDENTITY_KEY = "username"
"""Key under which the authenticated identity is stored and persisted."""


class SessionState(Enum):
    """Lifecycle of one runtime session."""

    UNSTARTED = "unstarted"
    CREATED = "created"
    RESUMED = "resumed"
    DESTROYED = "destroyed"

    @property
    def active(self) -> bool:
        return self in (SessionState.CREATED, SessionState.RESUMED)


@dataclass(frozen=True, slots=True)
class SessionRecord:
    """One row of the ``sessions`` table."""

    id: str
    data: str | None
    last_activity: int


@dataclass(slots=True)
class SessionData:
    """In-memory session payload.

    The authenticated identity is a typed field so login checks never
    depend on a string key being spelled right; everything else lives in
    ``extra``. ``get``/``set`` still accept ``IDENTITY_KEY`` and route it
    to the typed field, so handlers can treat the session as one map.
    """

    identity: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        if key == IDENTITY_KEY:
            return default if self.identity is None else self.identity
        return self.extra.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*.

        Raises:
            TypeError: If *key* is ``IDENTITY_KEY`` and *value* is neither
                a ``str`` nor ``None``.
        """
        if key == IDENTITY_KEY:
            if value is not None and not isinstance(value, str):
                msg = f"Session identity must be a str or None, got {type(value).__name__}"
                raise TypeError(msg)
            self.identity = value
        else:
            self.extra[key] = value

    def pop(self, key: str, default: Any = None) -> Any:
        if key == IDENTITY_KEY:
            value, self.identity = self.identity, None
            return default if value is None else value
        return self.extra.pop(key, default)

    def clear(self) -> None:
        self.identity = None
        self.extra.clear()

    def as_dict(self) -> dict[str, Any]:
        snapshot = dict(self.extra)
        if self.identity is not None:
            snapshot[IDENTITY_KEY] = self.identity
        return snapshot

    def to_json(self) -> str:
        """Serialize the payload as a JSON object.

        Values JSON cannot represent are stored as their ``str()`` with a
        warning on ``roost.sessions``; they read back as strings.
        """
        return json.dumps(self.as_dict(), default=_stringify)

    @classmethod
    def from_json(cls, raw: str | None) -> SessionData:
        """Rebuild a payload from a stored JSON object.

        Empty, unparseable, or non-object values yield an empty payload.
        """
        if not raw:
            return cls()
        try:
            decoded = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unparseable session payload")
            return cls()
        if not isinstance(decoded, dict):
            return cls()
        data = cls()
        for key, value in decoded.items():
            if key == IDENTITY_KEY and value is not None and not isinstance(value, str):
                logger.warning("Dropping non-string session identity (%s)", type(value).__name__)
                continue
            data.set(key, value)
        return data


def _stringify(value: Any) -> str:
    logger.warning("Storing %s session value as a string", type(value).__name__)
    return str(value)
