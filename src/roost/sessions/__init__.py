"""Database-backed sessions.

``Session`` is the per-request store; ``SessionData`` its typed payload.
The ``sessions`` table is created by roost's built-in migrations.
"""

from roost.sessions.data import IDENTITY_KEY, SessionData, SessionRecord, SessionState
from roost.sessions.store import DEFAULT_TTL, Session, new_session_id

__all__ = [
    "DEFAULT_TTL",
    "IDENTITY_KEY",
    "Session",
    "SessionData",
    "SessionRecord",
    "SessionState",
    "new_session_id",
]
