"""Tests for roost.middleware.sessions — signed cookie to database session."""

import pytest

from roost.app import App
from roost.config import AppConfig
from roost.errors import ConfigurationError
from roost.middleware.sessions import SessionConfig, SessionMiddleware, current_session
from roost.sessions.store import Session
from roost.testing import TestClient


def _set_cookies(response) -> list[str]:
    return [value for name, value in response.headers if name == "set-cookie"]


def _cookie_value(response, name: str = "roost_session") -> str | None:
    for header in _set_cookies(response):
        pair = header.split(";", 1)[0]
        key, _, value = pair.partition("=")
        if key == name:
            return value
    return None


@pytest.fixture
def app(tmp_path) -> App:
    app = App(AppConfig(secret_key="test-secret"), db=f"sqlite:///{tmp_path / 'app.db'}")

    @app.route("/")
    def index(session: Session) -> str:
        return f"user={session.username or 'anonymous'}"

    @app.route("/login-as/{name}")
    async def login_as(name: str, session: Session) -> str:
        await session.login(name)
        return "ok"

    @app.route("/logout")
    async def logout(session: Session) -> str:
        await session.destroy()
        return "bye"

    @app.route("/private", requires_auth=True)
    def private() -> str:
        return "secret"

    @app.route("/peek")
    def peek() -> str:
        session = current_session()
        return "bound" if session is not None else "unbound"

    return app


class TestSessionConfig:
    def test_defaults(self) -> None:
        config = SessionConfig(secret_key="s")
        assert config.cookie_name == "roost_session"
        assert config.ttl == 3600
        assert config.httponly is True
        assert config.samesite == "lax"

    def test_empty_secret_key_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="secret_key must not be empty"):
            SessionMiddleware(SessionConfig(secret_key=""))


class TestSigning:
    def test_round_trip(self) -> None:
        mw = SessionMiddleware(SessionConfig(secret_key="s"))
        assert mw.unsign(mw.sign("abc")) == "abc"

    def test_tampered_value_is_rejected(self) -> None:
        mw = SessionMiddleware(SessionConfig(secret_key="s"))
        signed = mw.sign("abc")
        assert mw.unsign(signed[:-1] + ("A" if signed[-1] != "A" else "B")) is None

    def test_other_key_is_rejected(self) -> None:
        signed = SessionMiddleware(SessionConfig(secret_key="one")).sign("abc")
        assert SessionMiddleware(SessionConfig(secret_key="two")).unsign(signed) is None

    @pytest.mark.parametrize("value", [None, "", "plain-id"])
    def test_missing_or_unsigned(self, value: str | None) -> None:
        assert SessionMiddleware(SessionConfig(secret_key="s")).unsign(value) is None


class TestCookieLifecycle:
    async def test_first_visit_sets_cookie(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.status == 200
        assert response.text == "user=anonymous"
        header = _set_cookies(response)[0]
        assert header.startswith("roost_session=")
        assert "HttpOnly" in header
        assert "SameSite=Lax" in header
        assert "Max-Age" not in header

    async def test_resumed_session_sends_no_cookie(self, app: App) -> None:
        async with TestClient(app) as client:
            await client.get("/")
            response = await client.get("/")
        assert _set_cookies(response) == []

    async def test_login_persists_across_requests(self, app: App) -> None:
        async with TestClient(app) as client:
            await client.get("/login-as/ann")
            response = await client.get("/")
        assert response.text == "user=ann"

    async def test_tampered_cookie_starts_fresh(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.get("/", headers={"Cookie": "roost_session=forged"})
        assert response.text == "user=anonymous"
        assert _cookie_value(response) not in (None, "forged")

    async def test_destroy_expires_cookie(self, app: App) -> None:
        async with TestClient(app) as client:
            await client.get("/login-as/ann")
            response = await client.get("/logout")
            assert "roost_session" not in client.cookies
            after = await client.get("/")
        header = _set_cookies(response)[0]
        assert "Max-Age=0" in header
        assert after.text == "user=anonymous"

    async def test_forbidden_response_sets_no_cookie(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.get("/private")
        assert response.status == 403
        assert _set_cookies(response) == []

    async def test_session_is_bound_during_dispatch(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.get("/peek")
        assert response.text == "bound"
        assert current_session() is None


class TestAppWiring:
    async def test_database_without_secret_key_is_rejected(self, tmp_path) -> None:
        app = App(db=f"sqlite:///{tmp_path / 'app.db'}")
        with pytest.raises(ConfigurationError, match="secret_key is required"):
            async with TestClient(app):
                pass

    async def test_no_database_means_no_session(self) -> None:
        app = App()

        @app.route("/peek")
        def peek() -> str:
            return "bound" if current_session() is not None else "unbound"

        async with TestClient(app) as client:
            response = await client.get("/peek")
        assert response.text == "unbound"
        assert _set_cookies(response) == []

    async def test_custom_cookie_name(self, tmp_path) -> None:
        app = App(
            AppConfig(secret_key="s", session_cookie="portal_sid"),
            db=f"sqlite:///{tmp_path / 'app.db'}",
        )

        @app.route("/")
        def index() -> str:
            return "hi"

        async with TestClient(app) as client:
            response = await client.get("/")
        assert _cookie_value(response, "portal_sid") is not None
