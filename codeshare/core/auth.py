"""Password hashing helpers (bcrypt, salted per hash)."""

from __future__ import annotations

import bcrypt

# bcrypt only uses the first 72 bytes of its input
_BCRYPT_MAX_BYTES = 72


def _encode(plain: str) -> bytes:
    return plain.encode()[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(_encode(plain), bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str) -> bool:
    # checkpw compares in constant time
    return bcrypt.checkpw(_encode(plain), hashed.encode())
