"""Registration, login and token redemption endpoints under ``/api/auth``."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field, field_validator

from .database import Database, normalize_email
from .errors import (
    AuthenticationError,
    BadCredentialsError,
    DuplicateAccountError,
    InvalidTokenError,
)
from .models import DEFAULT_ROLE, User
from .security import MAX_PASSWORD_BYTES, AuthenticationManager, PasswordHasher, password_too_long
from .tokens import TokenIssuer

logger = logging.getLogger("landingbuilder.auth")

REGISTERED_MESSAGE = "User registered successfully"
DUPLICATE_EMAIL_MESSAGE = "Email already exists"
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


class CredentialsRequest(BaseModel):
    email: str = Field(..., max_length=320)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("email must not be empty")
        return stripped

    @field_validator("password")
    @classmethod
    def _check_password_length(cls, value: str) -> str:
        if password_too_long(value):
            raise ValueError(f"password must not exceed {MAX_PASSWORD_BYTES} bytes")
        return value


class RegisterRequest(CredentialsRequest):
    pass


class LoginRequest(CredentialsRequest):
    pass


class TokenResponse(BaseModel):
    token: str


class AccountResponse(BaseModel):
    id: int
    email: str
    roles: List[str]


def register_user(
    database: Database,
    hasher: PasswordHasher,
    email: str,
    password: str,
) -> User:
    """Create a new account with the default role.

    Raises :class:`DuplicateAccountError` when the email is already taken,
    whether detected by the pre-check or by the unique constraint on insert.
    """

    if database.exists_by_email(email):
        raise DuplicateAccountError(email)

    user = User(email=email, password=hasher.hash(password), roles=(DEFAULT_ROLE,))
    user_id = database.save(user)
    return replace(user, id=user_id, email=normalize_email(email))


def register_auth_routes(
    router: APIRouter,
    *,
    database: Database,
    hasher: PasswordHasher,
    auth_manager: AuthenticationManager,
    token_issuer: TokenIssuer,
    catch_all_login_failures: bool = False,
) -> None:
    """Attach the authentication endpoints to ``router``."""

    bearer_security = HTTPBearer(auto_error=False)

    def _unauthorized(detail: str) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

    def current_user(
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer_security),
    ) -> User:
        if credentials is None or credentials.scheme.lower() != "bearer":
            raise _unauthorized("Missing bearer token")
        try:
            email = token_issuer.validate_token(credentials.credentials)
        except InvalidTokenError as exc:
            raise _unauthorized(str(exc)) from exc

        user = database.get_user_by_email(email)
        if user is None:
            raise _unauthorized("Unknown account")
        return user

    @router.post("/register", response_class=PlainTextResponse)
    def register(request: RegisterRequest) -> PlainTextResponse:
        try:
            user = register_user(database, hasher, request.email, request.password)
        except DuplicateAccountError:
            logger.warning("Rejected registration for an email that already exists")
            return PlainTextResponse(DUPLICATE_EMAIL_MESSAGE, status_code=status.HTTP_400_BAD_REQUEST)

        logger.info("Registered user #%s", user.id)
        return PlainTextResponse(REGISTERED_MESSAGE)

    @router.post(
        "/login",
        response_model=TokenResponse,
        responses={401: {"description": INVALID_CREDENTIALS_MESSAGE}},
    )
    def login(request: LoginRequest):
        handled = AuthenticationError if catch_all_login_failures else BadCredentialsError
        try:
            user = auth_manager.authenticate(request.email, request.password)
        except handled as exc:
            logger.info("Login failed: %s", exc.__class__.__name__)
            return PlainTextResponse(
                INVALID_CREDENTIALS_MESSAGE,
                status_code=status.HTTP_401_UNAUTHORIZED,
            )

        token = token_issuer.generate_token(user.email)
        logger.info("Issued session token for user #%s", user.id)
        return TokenResponse(token=token)

    @router.get("/me", response_model=AccountResponse)
    def me(user: User = Depends(current_user)) -> AccountResponse:
        return AccountResponse(id=user.id, email=user.email, roles=list(user.roles))


def create_auth_router(**kwargs) -> APIRouter:
    router = APIRouter(tags=["auth"])
    register_auth_routes(router, **kwargs)
    return router


__all__ = [
    "AccountResponse",
    "LoginRequest",
    "RegisterRequest",
    "TokenResponse",
    "create_auth_router",
    "register_auth_routes",
    "register_user",
]
