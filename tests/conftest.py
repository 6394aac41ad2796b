"""Shared fixtures for the roost test suite."""

from collections.abc import Callable

import pytest

from roost.context import RequestContext
from roost.data import BUILTIN_MIGRATIONS, Database, migrate
from roost.http.request import Request
from roost.routing.router import Router


class FakeClock:
    """Settable stand-in for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _request(path: str = "/", method: str = "GET", cookie: str = "") -> Request:
    headers: list[tuple[bytes, bytes]] = []
    if cookie:
        headers.append((b"cookie", cookie.encode("latin-1")))
    return Request.from_asgi({"type": "http", "method": method, "path": path, "headers": headers})


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Factory for bare GET requests: ``make_request("/path", cookie="a=b")``."""
    return _request


@pytest.fixture
def make_context() -> Callable[..., RequestContext]:
    """Factory for dispatch contexts with an optional router and session."""

    def factory(
        path: str = "/",
        *,
        router: Router | None = None,
        session: object = None,
    ) -> RequestContext:
        return RequestContext(
            request=_request(path),
            router=router or Router(),
            session=session,  # type: ignore[arg-type]
        )

    return factory


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def db(tmp_path):
    """A fresh SQLite database with roost's built-in schema applied."""
    database = Database(f"sqlite:///{tmp_path / 'roost.db'}")
    await database.connect()
    await migrate(database, BUILTIN_MIGRATIONS, source="roost")
    yield database
    await database.disconnect()
