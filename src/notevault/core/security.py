"""
Security Helpers

Argon2 password hashing and share token generation.
"""

from __future__ import annotations

import re
import secrets
from typing import Final

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

SHARE_TOKEN_BYTES: Final[int] = 16  # 128 bits -> 32 hex chars
ARGON2_PREFIX: Final[str] = "$argon2"
# $2a$, $2b$, $2y$ hashes written by PHP password_hash()
BCRYPT_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\$2[abxy]?\$\d{2}\$")

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time verification; malformed hashes simply fail."""
    try:
        return _hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def is_password_hash(value: str) -> bool:
    return value.startswith(ARGON2_PREFIX)


def is_bcrypt_hash(value: str) -> bool:
    """True for bcrypt hashes such as ``$2y$10$...``."""
    return BCRYPT_PATTERN.match(value) is not None


def new_share_token() -> str:
    return secrets.token_hex(SHARE_TOKEN_BYTES)
