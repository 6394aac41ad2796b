"""Portal — registration, login, and a protected dashboard.

Controllers are registered by ``(type, "method")``; roost builds them
per request and injects the router, the session, and the user
repository. Protected routes answer 403 until the session carries a
username.

Demonstrates:
- ``App(db=...)`` with the built-in ``sessions`` / ``users`` schema
- ``requires_auth=True`` routes
- constructor injection and ``app.provide()``
- ``/user/{id}`` bound to an ``int`` parameter
- argon2 password hashing

Run:
    ROOST_SECRET_KEY=change-me python app.py
"""

from dataclasses import replace
from pathlib import Path

from controllers import (
    AuthController,
    DashboardController,
    HomeController,
    UserController,
)
from models import UserRepository

from roost import App, AppConfig
from roost.data import get_db

TEMPLATES_DIR = Path(__file__).parent / "templates"

config = AppConfig.from_env(Path(__file__).parent / ".env", template_dir=TEMPLATES_DIR)
if not config.secret_key:
    config = replace(config, secret_key="change-me-in-production")

app = App(config, db=config.database_url)
app.provide(UserRepository, lambda: UserRepository(get_db()))

app.add_route("/", (HomeController, "index"))
app.add_route("/dashboard", (DashboardController, "index"), requires_auth=True)
app.add_route("/login", (AuthController, "login"))
app.add_route("/register", (AuthController, "register"))
app.add_route("/logout", (AuthController, "logout"), requires_auth=True)
app.add_route("/user/{id}", (UserController, "show"), requires_auth=True)


@app.template_filter()
def initial(value: str) -> str:
    return value[:1].upper()


if __name__ == "__main__":
    app.run()
