"""Typed async database access for roost.

SQL in, frozen dataclasses out. Not an ORM.

Basic usage::

    from roost.data import Database

    db = Database("sqlite:///app.db")

    @dataclass(frozen=True, slots=True)
    class User:
        id: int
        username: str

    user = await db.fetch_one(User, "SELECT * FROM users WHERE id = ?", 42)
"""

from roost.data.database import Database, get_db
from roost.data.errors import DataError, MigrationError, QueryError
from roost.data.migrate import BUILTIN_MIGRATIONS, MigrationResult, migrate

__all__ = [
    "BUILTIN_MIGRATIONS",
    "DataError",
    "Database",
    "MigrationError",
    "MigrationResult",
    "QueryError",
    "get_db",
    "migrate",
]
