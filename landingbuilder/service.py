"""Application factory wiring the repository, security and HTTP routes."""

from __future__ import annotations

import logging
import secrets
from typing import Dict, Optional

from fastapi import FastAPI

from .auth import create_auth_router
from .config import Settings, load_settings
from .database import Database
from .security import AuthenticationManager, PasswordHasher
from .tokens import TokenIssuer
from .web import create_ui_router

logger = logging.getLogger("landingbuilder.service")


def _initialise_database(database: Database) -> Database:
    database.initialize()
    return database


def _build_token_issuer(settings: Settings) -> TokenIssuer:
    secret = settings.jwt_secret
    if not secret:
        logger.warning(
            "LANDING_JWT_SECRET is not configured; using a random signing secret."
            " Issued tokens will not survive a restart."
        )
        secret = secrets.token_urlsafe(48)
    return TokenIssuer(
        secret_key=secret,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.jwt_expiry_minutes,
    )


def create_app(
    *,
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    hasher: Optional[PasswordHasher] = None,
    auth_manager: Optional[AuthenticationManager] = None,
    token_issuer: Optional[TokenIssuer] = None,
) -> FastAPI:
    """Instantiate the FastAPI application.

    Every collaborator can be supplied explicitly; anything omitted is built
    from ``settings`` (which itself defaults to :func:`load_settings`).
    """

    app_settings = settings or load_settings()
    db = _initialise_database(database or Database(app_settings.database_path))
    app_hasher = hasher or PasswordHasher()
    app_auth_manager = auth_manager or AuthenticationManager(db, app_hasher)
    app_token_issuer = token_issuer or _build_token_issuer(app_settings)

    app = FastAPI(
        title="Landing Builder API",
        version="0.1.0",
        description="Account registration, login and landing pages.",
    )
    app.state.settings = app_settings
    app.state.database = db
    app.state.hasher = app_hasher
    app.state.auth_manager = app_auth_manager
    app.state.token_issuer = app_token_issuer

    @app.get("/healthz")
    def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    app.include_router(
        create_auth_router(
            database=db,
            hasher=app_hasher,
            auth_manager=app_auth_manager,
            token_issuer=app_token_issuer,
            catch_all_login_failures=app_settings.catch_all_login_failures,
        ),
        prefix="/api/auth",
    )
    app.include_router(create_ui_router())

    logger.info(
        "Application configured (database=%s, login_failure_mode=%s)",
        db.path,
        app_settings.login_failure_mode,
    )
    return app


__all__ = ["create_app"]
