"""User records for the portal example.

A thin repository over roost's built-in ``users`` table. Passwords are
stored as argon2 hashes and checked with ``roost.security.passwords``.
"""

import logging
from dataclasses import dataclass

from roost.data import Database, QueryError
from roost.security.passwords import hash_password, needs_rehash, verify_password

logger = logging.getLogger("portal.models")


@dataclass(frozen=True, slots=True)
class User:
    id: int
    username: str
    password: str


class UserRepository:
    """Lookup and creation of users by credentials."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def get_by_id(self, user_id: int) -> User | None:
        return await self.db.fetch_one(User, "SELECT * FROM users WHERE id = ? LIMIT 1", user_id)

    async def get_by_username(self, username: str) -> User | None:
        return await self.db.fetch_one(
            User, "SELECT * FROM users WHERE username = ? LIMIT 1", username
        )

    async def create(self, username: str, password: str) -> bool:
        """Store a new user with a hashed password. False if the insert failed."""
        try:
            await self.db.execute(
                "INSERT INTO users (username, password) VALUES (?, ?)",
                username,
                hash_password(password),
            )
        except QueryError:
            logger.exception("User creation failed for username %r", username)
            return False
        return True

    async def authenticate(self, username: str, password: str) -> User | None:
        """Return the user when *password* matches, upgrading stale hashes."""
        user = await self.get_by_username(username)
        if user is None or not verify_password(password, user.password):
            return None
        if needs_rehash(user.password):
            await self.db.execute(
                "UPDATE users SET password = ? WHERE id = ?", hash_password(password), user.id
            )
        return user
