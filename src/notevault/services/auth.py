"""
Auth Service

Single shared credential set loaded from ``AUTH_USERS`` plus the
session helpers used by the auth router and the ``require_auth``
dependency.

Authentication is binary: a session is either logged in or not. There
are no roles and no per-note ownership.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import MutableMapping
from typing import Any

from fastapi import Request

from notevault.core.config import DEFAULT_AUTH_USERS, Settings
from notevault.core.errors import Unauthorized
from notevault.core.security import (
    hash_password,
    is_bcrypt_hash,
    is_password_hash,
    verify_password,
)

logger = logging.getLogger(__name__)

Session = MutableMapping[str, Any]

# A comma starts a new pair only when a "user:" follows, so the commas
# inside argon2 parameters (m=65536,t=3,p=4) stay with their hash.
_PAIR_SEPARATOR = re.compile(r",\s*(?=[^,:$\s]+:)")


def parse_auth_users(raw: str) -> dict[str, str]:
    """
    Parse ``user:password,user2:password2`` into ``{user: argon2_hash}``.

    Passwords that already look like argon2 hashes are kept as-is,
    anything else is hashed. Malformed pairs and bcrypt hashes (which
    cannot be verified) are skipped with a warning.
    """
    users: dict[str, str] = {}
    for pair in _PAIR_SEPARATOR.split(raw):
        username, sep, password = pair.strip().partition(":")
        username, password = username.strip(), password.strip()
        if not sep or not username or not password:
            if pair.strip():
                logger.warning("Ignoring malformed AUTH_USERS entry")
            continue
        if is_bcrypt_hash(password):
            logger.warning(
                "Ignoring bcrypt hash for '%s' in AUTH_USERS; use plaintext or an argon2 hash",
                username,
            )
            continue
        users[username] = password if is_password_hash(password) else hash_password(password)
    return users


class AuthContext:
    """
    Credential table and session operations for one running server.

    Built once at startup from configuration and stored on ``app.state``.
    """

    def __init__(self, users: dict[str, str]) -> None:
        self._users = users
        # Unknown usernames are verified against this so they cost the same
        self._dummy_hash = hash_password("notevault-dummy-password")

    @classmethod
    def from_settings(cls, config: Settings) -> AuthContext:
        if config.AUTH_USERS == DEFAULT_AUTH_USERS:
            logger.warning("AUTH_USERS not set, using default credentials")
        users = parse_auth_users(config.AUTH_USERS)
        if not users:
            logger.warning("AUTH_USERS contains no valid credentials; login is disabled")
        return cls(users)

    @property
    def usernames(self) -> list[str]:
        return sorted(self._users)

    def verify(self, username: str, password: str) -> bool:
        stored = self._users.get(username)
        if stored is None:
            verify_password(password, self._dummy_hash)
            return False
        return verify_password(password, stored)

    def login(self, session: Session, username: str, password: str) -> None:
        """
        Mark ``session`` authenticated if the credentials are valid.

        Raises:
            Unauthorized: Unknown user or wrong password.
        """
        if not self.verify(username, password):
            logger.warning("Failed login for '%s'", username)
            raise Unauthorized("Invalid username or password")

        session.clear()
        session["authenticated"] = True
        session["username"] = username
        session["login_time"] = int(time.time())
        logger.info("User '%s' logged in", username)

    @staticmethod
    def logout(session: Session) -> None:
        username = session.get("username")
        session.clear()
        if username:
            logger.info("User '%s' logged out", username)

    @staticmethod
    def is_authenticated(session: Session) -> bool:
        return session.get("authenticated") is True

    @classmethod
    def current_user(cls, session: Session) -> str | None:
        if not cls.is_authenticated(session):
            return None
        return session.get("username") or "unknown"


def get_auth_context(request: Request) -> AuthContext:
    """FastAPI dependency: the AuthContext built at startup."""
    return request.app.state.auth


def require_auth(request: Request) -> str:
    """
    FastAPI dependency guarding mutating endpoints.

    Returns:
        The logged-in username.

    Raises:
        Unauthorized: No authenticated session.
    """
    username = AuthContext.current_user(request.session)
    if username is None:
        raise Unauthorized("Authentication required")
    return username
