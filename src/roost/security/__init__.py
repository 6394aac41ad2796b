"""Security utilities: password hashing and audit events.

    from roost.security import hash_password, verify_password

    hashed = hash_password("my-password")
    ok = verify_password("my-password", hashed)
"""

from roost.security.audit import SecurityEvent, emit_security_event, set_security_event_sink
from roost.security.passwords import hash_password, needs_rehash, verify_password

__all__ = [
    "SecurityEvent",
    "emit_security_event",
    "hash_password",
    "needs_rehash",
    "set_security_event_sink",
    "verify_password",
]
