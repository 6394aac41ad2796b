"""Session middleware: binds a database-backed session to every request.

The cookie only carries the session id, signed with ``itsdangerous`` so a
client cannot forge or guess another id. The payload lives in the
``sessions`` table (see ``roost.sessions``).

Per request:

1. read and verify the cookie; a tampered or missing value counts as
   "no token";
2. build a ``Session`` for the token and ``start()`` it; a token whose row
   is gone leaves the session unstarted, and a second ``start()`` then
   creates a fresh one;
3. run the rest of the pipeline with the session reachable through
   ``current_session()``;
4. expire the cookie if the handler destroyed the session, or set it when
   the id differs from the one the client presented.

Error responses (403, 404, 500) skip step 4; any row created for such a
request is collected once it outlives the TTL.
"""

from contextvars import ContextVar
from dataclasses import dataclass

from itsdangerous import BadSignature, URLSafeSerializer

from roost.data.database import Database, get_db
from roost.errors import ConfigurationError
from roost.http.request import Request
from roost.middleware.protocol import AnyResponse, Next
from roost.sessions.data import SessionState
from roost.sessions.store import DEFAULT_TTL, Session

_SALT = "roost.session"

# -- Session ContextVar --

_session_var: ContextVar[Session | None] = ContextVar("roost_session", default=None)


def current_session() -> Session | None:
    """Return the session bound to the current request, if any."""
    return _session_var.get()


# -- Configuration --


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Session middleware configuration.

    ``secret_key`` is required: cookie values are signed, not encrypted.
    """

    secret_key: str
    cookie_name: str = "roost_session"
    ttl: int = DEFAULT_TTL
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"


# -- Middleware --


class SessionMiddleware:
    """Database-backed session middleware.

    ``App`` installs it automatically when it has a database. Standalone::

        app.add_middleware(SessionMiddleware(SessionConfig(secret_key="..."), db))

    Without an explicit *db* the request's app-level database is used.
    """

    __slots__ = ("_config", "_db", "_serializer")

    def __init__(self, config: SessionConfig, db: Database | None = None) -> None:
        if not config.secret_key:
            msg = "SessionConfig.secret_key must not be empty."
            raise ConfigurationError(msg)
        self._config = config
        self._db = db
        self._serializer = URLSafeSerializer(config.secret_key, salt=_SALT)

    @property
    def config(self) -> SessionConfig:
        return self._config

    def sign(self, session_id: str) -> str:
        return self._serializer.dumps(session_id)

    def unsign(self, value: str | None) -> str | None:
        """Return the session id carried by a cookie value, or ``None``."""
        if not value:
            return None
        try:
            session_id = self._serializer.loads(value)
        except BadSignature:
            return None
        return session_id if isinstance(session_id, str) and session_id else None

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        """Start the session, dispatch, then sync the cookie."""
        presented = self.unsign(request.cookies.get(self._config.cookie_name))
        session = Session(self._db or get_db(), presented, ttl=self._config.ttl)
        if await session.start() is SessionState.UNSTARTED:
            await session.start()

        token = _session_var.set(session)
        try:
            response = await next(request)
        finally:
            _session_var.reset(token)

        cfg = self._config
        if session.state is SessionState.DESTROYED:
            return response.without_cookie(cfg.cookie_name, path=cfg.path)
        if session.id is not None and session.id != presented:
            return response.with_cookie(
                cfg.cookie_name,
                self.sign(session.id),
                path=cfg.path,
                domain=cfg.domain,
                secure=cfg.secure,
                httponly=cfg.httponly,
                samesite=cfg.samesite,
            )
        return response
