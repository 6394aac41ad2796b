"""Async SQLite wrapper using stdlib sqlite3 + anyio.

Every blocking sqlite3 call runs in a worker thread via
``anyio.to_thread``. The connection is opened with
``check_same_thread=False`` because consecutive calls may land on
different pool threads, and with ``autocommit=True`` so each statement
commits on its own; ``Database.transaction()`` flips it off as needed.
"""

import sqlite3
from collections.abc import Callable, Sequence
from typing import Any

import anyio


async def _run_sync(func: Callable[[], Any]) -> Any:
    return await anyio.to_thread.run_sync(func)


class AsyncConnection:
    """Async facade over ``sqlite3.Connection`` returning dict rows."""

    __slots__ = ("_conn",)

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @property
    def autocommit(self) -> bool:
        return bool(self._conn.autocommit)

    @autocommit.setter
    def autocommit(self, value: bool) -> None:
        self._conn.autocommit = value

    async def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        def run() -> list[dict[str, Any]]:
            cursor = self._conn.execute(sql, params)
            columns = [desc[0] for desc in cursor.description or ()]
            return [dict(zip(columns, row, strict=True)) for row in cursor.fetchall()]

        return await _run_sync(run)

    async def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
        def run() -> dict[str, Any] | None:
            cursor = self._conn.execute(sql, params)
            row = cursor.fetchone()
            if row is None:
                return None
            columns = [desc[0] for desc in cursor.description]
            return dict(zip(columns, row, strict=True))

        return await _run_sync(run)

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run a statement and return the affected row count."""
        return await _run_sync(lambda: self._conn.execute(sql, params).rowcount)

    async def executescript(self, sql: str) -> None:
        """Run several statements at once.

        ``executescript`` commits any pending transaction first and
        ignores ``autocommit``.
        """
        await _run_sync(lambda: self._conn.executescript(sql))

    async def commit(self) -> None:
        await _run_sync(self._conn.commit)

    async def rollback(self) -> None:
        await _run_sync(self._conn.rollback)

    async def close(self) -> None:
        await _run_sync(self._conn.close)


async def connect(path: str) -> AsyncConnection:
    """Open an async SQLite connection with WAL and foreign keys enabled."""

    def run() -> sqlite3.Connection:
        conn = sqlite3.connect(path, autocommit=True, check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    return AsyncConnection(await _run_sync(run))
