"""Typed async database access over SQLite.

SQL in, frozen dataclasses (or plain dict rows) out. Not an ORM.

Connection URL format::

    sqlite:///path/to/db.sqlite    # SQLite file
    sqlite:///:memory:             # In-memory SQLite

Concurrency:
    The app owns one connection. Statements are serialized through an
    ``anyio.Lock`` so two tasks never drive the same connection at once.
    Outside ``transaction()`` every statement autocommits on its own.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

import anyio

from roost.data._mapping import map_row, map_rows
from roost.data._sqlite import AsyncConnection, connect
from roost.data.errors import DataError, QueryError

logger = logging.getLogger("roost.data")

# Set inside transaction(); query methods reuse the held connection.
_current_conn: ContextVar[AsyncConnection] = ContextVar("roost_db_conn")

# App-level database accessor (set by the handler pipeline per request).
_db_var: ContextVar[Database] = ContextVar("roost_db")


def get_db() -> Database:
    """Return the app-level database instance.

    Raises ``LookupError`` outside a request of an app with a database.
    """
    return _db_var.get()


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Database connection configuration."""

    url: str
    echo: bool = False

    @property
    def path(self) -> str:
        """Filesystem path (or ``:memory:``) taken from the URL."""
        for prefix in ("sqlite:///", "sqlite://"):
            if self.url.startswith(prefix):
                return self.url[len(prefix) :]
        msg = f"Unsupported database URL: {self.url!r}. Expected sqlite:///path"
        raise DataError(msg)


class Database:
    """Typed async database access.

    Usage::

        db = Database("sqlite:///app.db")

        @dataclass(frozen=True, slots=True)
        class User:
            id: int
            username: str

        users = await db.fetch(User, "SELECT * FROM users")
        user = await db.fetch_one(User, "SELECT * FROM users WHERE id = ?", 42)
        rows = await db.query("SELECT id, username FROM users")
        await db.execute("DELETE FROM users WHERE id = ?", 42)
        count = await db.fetch_val("SELECT COUNT(*) FROM users")

        async with db.transaction():
            await db.execute("INSERT INTO users (username) VALUES (?)", "a")
            await db.execute("INSERT INTO users (username) VALUES (?)", "b")
    """

    __slots__ = ("_async_lock", "_config", "_conn", "_lock", "_path")

    def __init__(self, url: str, /, *, echo: bool = False) -> None:
        self._config = DatabaseConfig(url=url, echo=echo)
        self._path = self._config.path
        self._lock = threading.Lock()
        self._async_lock: anyio.Lock | None = None  # needs a running event loop
        self._conn: AsyncConnection | None = None

    @property
    def url(self) -> str:
        return self._config.url

    @property
    def connected(self) -> bool:
        return self._conn is not None

    # -- Connection management --

    def _get_async_lock(self) -> anyio.Lock:
        if self._async_lock is None:
            self._async_lock = anyio.Lock()
        return self._async_lock

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[AsyncConnection]:
        """Hold the connection for one statement, or reuse a transaction's."""
        try:
            conn = _current_conn.get()
        except LookupError:
            pass
        else:
            yield conn
            return

        if self._conn is None:
            await self.connect()
        async with self._get_async_lock():
            assert self._conn is not None
            yield self._conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Run the enclosed statements atomically.

        Commits on clean exit, rolls back on exception. Nested blocks join
        the outer transaction.
        """
        try:
            _current_conn.get()
        except LookupError:
            pass
        else:
            yield
            return

        if self._conn is None:
            await self.connect()
        async with self._get_async_lock():
            conn = self._conn
            assert conn is not None
            token = _current_conn.set(conn)
            conn.autocommit = False
            try:
                yield
                await conn.commit()
            except BaseException:
                await conn.rollback()
                raise
            finally:
                conn.autocommit = True
                _current_conn.reset(token)

    def _log_query(self, sql: str, params: Sequence[Any], elapsed: float) -> None:
        if self._config.echo:
            logger.info("%6.1fms  %s  params=%r", elapsed * 1000, sql, tuple(params))

    # -- Public query API --

    async def query(self, sql: str, /, *params: Any) -> list[dict[str, Any]]:
        """Run a query and return rows as plain dicts."""
        t0 = time.perf_counter()
        async with self._connection() as conn:
            try:
                return await conn.fetch_all(sql, params)
            except Exception as exc:
                raise QueryError(str(exc)) from exc
            finally:
                self._log_query(sql, params, time.perf_counter() - t0)

    async def fetch[T](self, cls: type[T], sql: str, /, *params: Any) -> list[T]:
        """Run a query and map every row onto *cls*."""
        return map_rows(cls, await self.query(sql, *params))

    async def fetch_one[T](self, cls: type[T], sql: str, /, *params: Any) -> T | None:
        """Run a query and map the first row onto *cls*, or return ``None``."""
        t0 = time.perf_counter()
        async with self._connection() as conn:
            try:
                row = await conn.fetch_one(sql, params)
            except Exception as exc:
                raise QueryError(str(exc)) from exc
            finally:
                self._log_query(sql, params, time.perf_counter() - t0)
        return None if row is None else map_row(cls, row)

    async def fetch_val(self, sql: str, /, *params: Any) -> Any:
        """Return the first column of the first row, or ``None``.

        Useful for COUNT, MAX, and existence checks.
        """
        rows = await self.query(sql, *params)
        if not rows:
            return None
        return next(iter(rows[0].values()))

    async def execute(self, sql: str, /, *params: Any) -> int:
        """Run an INSERT/UPDATE/DELETE and return the affected row count."""
        t0 = time.perf_counter()
        async with self._connection() as conn:
            try:
                return await conn.execute(sql, params)
            except Exception as exc:
                raise QueryError(str(exc)) from exc
            finally:
                self._log_query(sql, params, time.perf_counter() - t0)

    async def execute_script(self, sql: str, /) -> None:
        """Run a multi-statement script (migrations)."""
        t0 = time.perf_counter()
        async with self._connection() as conn:
            try:
                await conn.executescript(sql)
            except Exception as exc:
                raise QueryError(str(exc)) from exc
            finally:
                self._log_query(sql, (), time.perf_counter() - t0)

    # -- Lifecycle --

    async def connect(self) -> None:
        """Open the connection. Called automatically on first query."""
        if self._conn is not None:
            return
        conn = await connect(self._path)
        with self._lock:
            if self._conn is None:
                self._conn = conn
                return
        await conn.close()

    async def disconnect(self) -> None:
        """Close the connection."""
        with self._lock:
            conn, self._conn = self._conn, None
        if conn is not None:
            await conn.close()

    async def __aenter__(self) -> Database:
        await self.connect()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.disconnect()
