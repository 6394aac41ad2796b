"""Controllers for the portal example.

Each route names one of these types and a method; roost builds a fresh
instance per request and injects the router, the session, and the
``UserRepository`` the app provides.
"""

from models import UserRepository

from roost import Controller, NotFound, Request, Router, Session
from roost.security.audit import emit_security_event


class HomeController(Controller):
    def __init__(self, router: Router, session: Session) -> None:
        super().__init__(router)
        self.session = session

    def index(self):
        return self.render(
            "home",
            title="Home",
            logged_in=self.session.is_logged_in(),
            username=self.session.username,
        )


class AuthController(Controller):
    """Login, registration and logout."""

    def __init__(self, router: Router, session: Session, users: UserRepository) -> None:
        super().__init__(router)
        self.session = session
        self.users = users

    async def login(self, request: Request):
        if self.session.is_logged_in():
            return self.redirect("/dashboard")

        if request.method != "POST":
            return self.render("login", title="Login", error="")

        form = await request.form()
        username = form.get("username", "").strip()
        user = await self.users.authenticate(username, form.get("password", ""))
        if user is None:
            emit_security_event("auth.login.failed", request=request, username=username)
            return self.render("login", title="Login", error="Invalid credentials"), 401

        await self.session.login(user.username)
        emit_security_event("auth.login.succeeded", request=request, username=user.username)
        return self.redirect("/dashboard")

    async def register(self, request: Request):
        """Create an account, then send the user to the login page.

        All fields are required, the passwords must match, and the
        username must not be taken.
        """
        if self.session.is_logged_in():
            return self.redirect("/dashboard")

        if request.method != "POST":
            return self.render("register", title="Register", error="", username="")

        form = await request.form()
        username = form.get("username", "").strip()
        password = form.get("password", "")
        confirm = form.get("confirm_password", "")

        error = ""
        if not username or not password or not confirm:
            error = "All fields are required"
        elif password != confirm:
            error = "Passwords do not match"
        elif await self.users.get_by_username(username) is not None:
            error = "Username already exists"
        elif not await self.users.create(username, password):
            error = "Error during registration"

        if error:
            return self.render("register", title="Register", error=error, username=username), 400
        return self.redirect("/login")

    async def logout(self):
        await self.session.destroy()
        return self.redirect("/login")


class DashboardController(Controller):
    def index(self, session: Session):
        return self.render("dashboard", title="Dashboard", username=session.username)


class UserController(Controller):
    def __init__(self, router: Router, users: UserRepository) -> None:
        super().__init__(router)
        self.users = users

    async def show(self, id: int):
        user = await self.users.get_by_id(id)
        if user is None:
            raise NotFound(f"No user with id {id}")
        return self.render("user", title=user.username, user=user)
