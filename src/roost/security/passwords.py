"""Password hashing with argon2id.

Hashes are PHC-format strings (``$argon2id$v=19$m=...``) safe to store in
the ``users.password`` column as-is. Parameters travel inside the hash,
so ``needs_rehash`` can tell when a stored hash predates the current
defaults.

Usage::

    from roost.security.passwords import hash_password, verify_password

    hashed = hash_password("my-password")
    ok = verify_password("my-password", hashed)
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_ARGON2_PREFIX = "$argon2"

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a password with argon2id.

    Raises ``ValueError`` for an empty password.
    """
    if not password:
        msg = "Password must not be empty."
        raise ValueError(msg)
    return _hasher.hash(password)


def verify_password(password: str, phc_hash: str) -> bool:
    """Check *password* against a stored hash.

    Returns ``False`` for a wrong password, an empty input, or a stored
    value that is not an argon2 hash (e.g. a legacy plain-text column).
    """
    if not password or not phc_hash or not phc_hash.startswith(_ARGON2_PREFIX):
        return False
    try:
        return _hasher.verify(phc_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(phc_hash: str) -> bool:
    """True when *phc_hash* was made with weaker parameters than today's."""
    return _hasher.check_needs_rehash(phc_hash)
