"""Roost application class.

Mutable during setup (route registration, middleware, filters, providers).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from kida import Environment

from roost._internal.asgi import Receive, Scope, Send
from roost._internal.invoke import invoke
from roost._internal.types import ErrorHandler, Handler, Provider
from roost.config import AppConfig
from roost.data.database import Database, _db_var
from roost.data.migrate import BUILTIN_MIGRATIONS, migrate
from roost.errors import ConfigurationError
from roost.middleware.protocol import Middleware
from roost.middleware.sessions import SessionConfig, SessionMiddleware
from roost.resolve import Resolver
from roost.routing.route import HandlerSpec, Route
from roost.routing.router import Router
from roost.server.handler import handle_request
from roost.templating.integration import create_environment


class App:
    """The roost application.

    Usage::

        app = App(AppConfig.from_env(), db="sqlite:///portal.db")
        app.add_route("/", (HomeController, "index"))
        app.add_route("/dashboard", (DashboardController, "index"), requires_auth=True)

        @app.route("/health")
        def health() -> str:
            return "ok"

    With a database, the app owns the connection for its lifetime, applies
    the built-in ``sessions``/``users`` schema (plus *migrations*, if given)
    at startup, and binds a session to every request through a signed
    cookie. That requires ``config.secret_key``.

    Thread safety:
        The setup phase is single-threaded (registration at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread compiles the app on first request.
    """

    __slots__ = (
        "_db",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_kida_env",
        "_middleware",
        "_middleware_list",
        "_migrations_dir",
        "_providers",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "_template_filters",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        db: Database | str | None = None,
        migrations: str | Path | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._template_filters: dict[str, Callable[..., Any]] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._providers: dict[type, Provider] = {}
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Database: accepts a Database instance or connection URL string.
        if isinstance(db, str):
            self._db: Database | None = Database(db, echo=self.config.database_echo)
        else:
            self._db = db
        self._migrations_dir = migrations

        # The router exists from the start so controllers and templates can
        # hold it; the resolver shares the provider table with provide().
        self._router = Router(
            resolver=Resolver(self._providers),
            root_path=self.config.root_path,
        )

        # Compiled state, set during _freeze()
        self._middleware: tuple[Callable[..., Any], ...] = ()
        self._kida_env: Environment | None = None

    # -- Route registration --

    def add_route(
        self,
        pattern: str,
        handler: HandlerSpec,
        requires_auth: bool = False,
    ) -> Route:
        """Register a route.

        *handler* is ``(OwnerType, "method")`` or a plain callable. Routes
        match in registration order; the first match wins.
        """
        self._check_not_frozen()
        return self._router.add_route(pattern, handler, requires_auth)

    def route(
        self,
        pattern: str,
        *,
        requires_auth: bool = False,
    ) -> Callable[[Handler], Handler]:
        """Register a plain function as a route handler via decorator."""

        def decorator(func: Handler) -> Handler:
            self.add_route(pattern, func, requires_auth)
            return func

        return decorator

    @property
    def routes(self) -> tuple[Route, ...]:
        return self._router.routes

    # -- Service injection --

    def provide(self, annotation: type, factory: Provider) -> None:
        """Register a provider factory for dependency injection.

        When a constructor or handler parameter is annotated with
        *annotation*, roost calls *factory* (with no arguments) and injects
        the result instead of building the type itself::

            app.provide(UserRepository, lambda: UserRepository(get_db()))
        """
        self._check_not_frozen()
        self._providers[annotation] = factory

    @property
    def db(self) -> Database:
        """The database instance, if configured.

        Raises ``RuntimeError`` if no database was configured on this app.
        """
        if self._db is None:
            msg = (
                "No database configured. Pass db= to App() or use "
                "Database directly: from roost.data import Database"
            )
            raise RuntimeError(msg)
        return self._db

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline.

        User middleware runs inside the session middleware, so
        ``current_session()`` already works there.
        """
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Template integration --

    def template_filter(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template filter."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._template_filters[name or func.__name__] = func
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup, after
        the database is connected and migrated.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator.

        Hooks run in registration order before the database disconnects.
        """
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app with uvicorn (blocking)."""
        import uvicorn

        uvicorn.run(
            self,
            host=host or self.config.host,
            port=port or self.config.port,
            log_level="debug" if self.config.debug else "info",
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles the lifespan scope directly, then delegates HTTP scopes to
        the request handler pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            kida_env=self._kida_env,
            debug=self.config.debug,
            db=self._db,
        )

    async def startup(self) -> None:
        """Connect and migrate the database, then run startup hooks.

        Called by the lifespan protocol and by ``TestClient``.
        """
        self._ensure_frozen()
        if self._db is not None:
            await self._db.connect()
            _db_var.set(self._db)
            await migrate(self._db, BUILTIN_MIGRATIONS, source="roost")
            if self._migrations_dir is not None:
                await migrate(self._db, self._migrations_dir)

        for hook in self._startup_hooks:
            await invoke(hook)

    async def shutdown(self) -> None:
        """Run shutdown hooks, then close the database."""
        for hook in self._shutdown_hooks:
            await invoke(hook)
        if self._db is not None:
            await self._db.disconnect()

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        # 1. Sessions wrap everything else when there is a database
        middleware_list: list[Callable[..., Any]] = list(self._middleware_list)
        if self._db is not None:
            if not self.config.secret_key:
                msg = (
                    "AppConfig.secret_key is required when the app has a database: "
                    "session cookies are signed with it. Set ROOST_SECRET_KEY."
                )
                raise ConfigurationError(msg)
            session_config = SessionConfig(
                secret_key=self.config.secret_key,
                cookie_name=self.config.session_cookie,
                ttl=self.config.session_ttl,
                path=self.config.root_path or "/",
                secure=self.config.session_secure,
            )
            middleware_list.insert(0, SessionMiddleware(session_config, self._db))
        self._middleware = tuple(middleware_list)

        # 2. Templates
        self._kida_env = create_environment(self.config, self._template_filters)

        # 3. No more routes
        self._router.freeze()
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, middleware, and filters before calling app.run()."
            )
            raise RuntimeError(msg)
