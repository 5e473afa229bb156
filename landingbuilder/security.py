"""Password hashing and credential verification."""
from __future__ import annotations

import logging
import sqlite3

from passlib.context import CryptContext

from .database import Database
from .errors import AuthenticationServiceError, BadCredentialsError
from .models import User

logger = logging.getLogger("landingbuilder.security")

# bcrypt only reads this many bytes of the secret.
MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


class PasswordHasher:
    """Salted one-way password hashing backed by passlib's bcrypt scheme."""

    def __init__(self, *, bcrypt_rounds: int | None = None) -> None:
        options = {"bcrypt__rounds": bcrypt_rounds} if bcrypt_rounds is not None else {}
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", **options)

    def hash(self, password: str) -> str:
        if not password:
            raise ValueError("Password must not be empty")
        if password_too_long(password):
            raise ValueError(f"Password must not exceed {MAX_PASSWORD_BYTES} bytes")
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        if not hashed or password_too_long(password):
            return False
        try:
            return self._context.verify(password, hashed)
        except ValueError:
            # Unknown or malformed hash format.
            return False


class AuthenticationManager:
    """Verify an email/password pair against the stored, hashed credentials."""

    def __init__(self, database: Database, hasher: PasswordHasher) -> None:
        self._database = database
        self._hasher = hasher
        self._dummy_hash = hasher.hash("landingbuilder-timing-equaliser")

    def authenticate(self, email: str, password: str) -> User:
        """Return the matching user or raise an :class:`AuthenticationError`.

        Unknown emails and wrong passwords both raise
        :class:`BadCredentialsError`. Failures of the underlying store raise
        :class:`AuthenticationServiceError`.
        """

        try:
            user = self._database.get_user_by_email(email)
        except sqlite3.Error as exc:
            logger.error("User lookup failed during authentication: %s", exc)
            raise AuthenticationServiceError("User store is unavailable") from exc

        if user is None:
            self._hasher.verify(password, self._dummy_hash)
            raise BadCredentialsError("Bad credentials")

        if not self._hasher.verify(password, user.password):
            raise BadCredentialsError("Bad credentials")

        return user


__all__ = ["MAX_PASSWORD_BYTES", "AuthenticationManager", "PasswordHasher", "password_too_long"]
