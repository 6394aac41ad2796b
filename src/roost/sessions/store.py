"""Database-backed session store.

One ``Session`` per request, bound to the token the client presented
(or none). The persisted row in ``sessions`` is the only state shared
between requests; the in-memory ``SessionData`` is synchronized with it
on ``start()`` and ``update_session()`` only.

Lifecycle::

    UNSTARTED --start()--> CREATED   (no token: new id, empty row)
    UNSTARTED --start()--> RESUMED   (token with a live row)
    UNSTARTED --start()--> UNSTARTED (token without a row: token dropped)
    CREATED/RESUMED --destroy()--> DESTROYED

Every ``start()`` first deletes rows idle for longer than the TTL.
Persistence failures never raise out of the store: they are logged and
read as "nothing found" / "nothing written".
"""

import logging
import secrets
import time
from collections.abc import Callable
from typing import Any

from roost.data.database import Database
from roost.data.errors import QueryError
from roost.sessions.data import SessionData, SessionRecord, SessionState

logger = logging.getLogger("roost.sessions")

DEFAULT_TTL = 3600


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


class Session:
    """Runtime view of one client's session.

    Usage (the session middleware does this for every request)::

        session = Session(db, token_from_cookie)
        await session.start()
        session.set("username", "alice")
        await session.update_session()
    """

    __slots__ = ("_data", "_db", "_id", "_now", "_state", "ttl")

    def __init__(
        self,
        db: Database,
        session_id: str | None = None,
        *,
        ttl: int = DEFAULT_TTL,
        now: Callable[[], float] = time.time,
    ) -> None:
        self._db = db
        self._id = session_id or None
        self._data = SessionData()
        self._state = SessionState.UNSTARTED
        self._now = now
        self.ttl = ttl

    def __repr__(self) -> str:
        return f"<Session {self._state.value} id={self._id!r}>"

    @property
    def id(self) -> str | None:
        return self._id

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def data(self) -> SessionData:
        return self._data

    def _timestamp(self) -> int:
        return int(self._now())

    # -- Lifecycle --

    async def start(self) -> SessionState:
        """Collect expired rows, then create or resume this session.

        With an id and a live row, the persisted payload replaces the
        in-memory one entirely. With an id but no row, the id is dropped
        and the session is left ``UNSTARTED`` so the next ``start()``
        creates a fresh one.
        """
        await self.gc()

        if self._id is None:
            self._id = new_session_id()
            self._data = SessionData()
            try:
                await self._db.execute(
                    "INSERT INTO sessions (id, data, last_activity) VALUES (?, ?, ?)",
                    self._id,
                    self._data.to_json(),
                    self._timestamp(),
                )
            except QueryError:
                logger.exception("Failed to persist new session")
            self._state = SessionState.CREATED
            return self._state

        record = await self._load(self._id)
        if record is None:
            logger.debug("Session %s not found; discarding client token", self._id[:8])
            self._id = None
            self._data = SessionData()
            self._state = SessionState.UNSTARTED
            return self._state

        self._data = SessionData.from_json(record.data)
        self._state = SessionState.RESUMED
        await self.update_session()
        return self._state

    async def gc(self) -> int:
        """Delete every row idle for longer than the TTL; return the count."""
        cutoff = self._timestamp() - self.ttl
        try:
            deleted = await self._db.execute(
                "DELETE FROM sessions WHERE last_activity < ?", cutoff
            )
        except QueryError:
            logger.exception("Session garbage collection failed")
            return 0
        if deleted:
            logger.debug("Collected %d expired session(s)", deleted)
        return deleted

    async def update_session(self, session_id: str | None = None) -> bool:
        """Write the whole in-memory payload and refresh ``last_activity``.

        Targets *session_id* when given, otherwise this session's own id.
        A no-op (returning False) unless the session is created or resumed.
        """
        if not self._state.active:
            return False
        target = session_id or self._id
        if target is None:
            return False
        try:
            updated = await self._db.execute(
                "UPDATE sessions SET data = ?, last_activity = ? WHERE id = ?",
                self._data.to_json(),
                self._timestamp(),
                target,
            )
        except QueryError:
            logger.exception("Failed to persist session %s", target[:8])
            return False
        return updated > 0

    async def destroy(self) -> None:
        """Clear the payload, drop the id, and delete the persisted row.

        The session middleware expires the client cookie once the state is
        ``DESTROYED``.
        """
        old_id = self._id
        self._data.clear()
        self._id = None
        self._state = SessionState.DESTROYED
        if old_id is None:
            return
        try:
            await self._db.execute("DELETE FROM sessions WHERE id = ?", old_id)
        except QueryError:
            logger.exception("Failed to delete session %s", old_id[:8])

    async def _load(self, session_id: str) -> SessionRecord | None:
        try:
            return await self._db.fetch_one(
                SessionRecord,
                "SELECT id, data, last_activity FROM sessions WHERE id = ?",
                session_id,
            )
        except QueryError:
            logger.exception("Failed to load session %s", session_id[:8])
            return None

    # -- Payload access (in memory only) --

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data.set(key, value)

    def pop(self, key: str, default: Any = None) -> Any:
        return self._data.pop(key, default)

    def is_logged_in(self) -> bool:
        return self._data.identity is not None

    @property
    def username(self) -> str | None:
        return self._data.identity

    async def login(self, username: str) -> bool:
        """Record *username* as the session identity and persist it."""
        self._data.identity = username
        return await self.update_session()

    async def logout(self) -> None:
        """Alias for ``destroy()``."""
        await self.destroy()
