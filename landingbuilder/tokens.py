"""Signed session tokens issued after a successful login."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

from .errors import InvalidTokenError


class TokenIssuer:
    """Create and validate HS256 JSON Web Tokens for a username."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60,
    ) -> None:
        if not secret_key:
            raise ValueError("A token signing secret must be provided")
        if expire_minutes <= 0:
            raise ValueError("Token expiry must be a positive number of minutes")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def _build_payload(self, username: str) -> Dict[str, Any]:
        issued_at = datetime.now(timezone.utc)
        return {
            "sub": username,
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=self.expire_minutes),
        }

    def generate_token(self, username: str) -> str:
        if not username:
            raise ValueError("Tokens can only be issued for a non-empty username")
        return jwt.encode(self._build_payload(username), self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError("Invalid token") from exc

    def validate_token(self, token: str) -> str:
        """Return the username the token was issued for."""

        subject = self.decode(token).get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidTokenError("Token has no subject")
        return subject


__all__ = ["TokenIssuer"]
