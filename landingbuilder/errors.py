"""Exceptions raised by the account and authentication layers."""

from __future__ import annotations


class DuplicateAccountError(ValueError):
    """Raised when an account with the same email is already stored."""

    def __init__(self, email: str) -> None:
        super().__init__(f"A user with email {email!r} already exists")
        self.email = email


class AuthenticationError(Exception):
    """Base class for failures while verifying a credential pair or token."""


class BadCredentialsError(AuthenticationError):
    """The email is unknown or the password does not match."""


class AuthenticationServiceError(AuthenticationError):
    """The user store could not be queried while authenticating."""


class InvalidTokenError(AuthenticationError):
    """A session token is malformed, expired, or has no subject."""


__all__ = [
    "AuthenticationError",
    "AuthenticationServiceError",
    "BadCredentialsError",
    "DuplicateAccountError",
    "InvalidTokenError",
]
