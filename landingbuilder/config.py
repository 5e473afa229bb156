"""Configuration management for the landing builder backend."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .database import resolve_database_path

LOGIN_FAILURE_MODES = ("narrow", "catch_all")
JWT_ALGORITHMS = ("HS256", "HS384", "HS512")


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the optional YAML file and environment.

    ``jwt_secret`` may be ``None``, in which case the application generates a
    per-process secret at startup.
    """

    database_path: Path
    jwt_secret: Optional[str] = None
    jwt_algorithm: str = "HS256"
    jwt_expiry_minutes: int = 60
    login_failure_mode: str = "narrow"

    def __post_init__(self) -> None:
        if self.login_failure_mode not in LOGIN_FAILURE_MODES:
            raise ValueError(
                f"login_failure_mode must be one of: {', '.join(LOGIN_FAILURE_MODES)}"
            )
        if self.jwt_expiry_minutes <= 0:
            raise ValueError("jwt_expiry_minutes must be a positive integer")
        if self.jwt_algorithm not in JWT_ALGORITHMS:
            raise ValueError(f"jwt_algorithm must be one of: {', '.join(JWT_ALGORITHMS)}")

    @property
    def catch_all_login_failures(self) -> bool:
        return self.login_failure_mode == "catch_all"


def resolve_config_path(env_value: Optional[str]) -> Optional[Path]:
    """Resolve the path to the optional configuration file."""
    if not env_value:
        return None
    return Path(env_value).expanduser().resolve(strict=False)


def _load_yaml(config_path: Optional[Path]) -> Dict[str, object]:
    if config_path is None:
        return {}
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping at the top level")
    return raw


def _section(raw: Mapping[str, object], name: str) -> Mapping[str, object]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Configuration section '{name}' must be a mapping")
    return value


def _pick(env_value: Optional[str], file_value: object) -> Optional[str]:
    if env_value is not None and env_value.strip():
        return env_value.strip()
    if file_value is None:
        return None
    return str(file_value)


def load_settings(
    config_path: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build :class:`Settings`, letting environment variables override the file."""

    env = os.environ if environ is None else environ
    if config_path is None:
        config_path = resolve_config_path(env.get("LANDING_CONFIG"))

    raw = _load_yaml(config_path)
    database = _section(raw, "database")
    auth = _section(raw, "auth")

    file_db_path = database.get("path")
    if file_db_path and config_path is not None:
        candidate = Path(str(file_db_path)).expanduser()
        if not candidate.is_absolute():
            file_db_path = config_path.parent / candidate
    db_value = _pick(env.get("LANDING_DB_PATH"), file_db_path)

    expiry_raw = _pick(env.get("LANDING_JWT_EXPIRY_MINUTES"), auth.get("jwt_expiry_minutes"))
    try:
        expiry = int(expiry_raw) if expiry_raw is not None else 60
    except ValueError as exc:
        raise ValueError("jwt_expiry_minutes must be an integer") from exc

    return Settings(
        database_path=resolve_database_path(db_value),
        jwt_secret=_pick(env.get("LANDING_JWT_SECRET"), auth.get("jwt_secret")),
        jwt_algorithm=(_pick(env.get("LANDING_JWT_ALGORITHM"), auth.get("jwt_algorithm")) or "HS256").upper(),
        jwt_expiry_minutes=expiry,
        login_failure_mode=(
            _pick(env.get("LANDING_LOGIN_FAILURE_MODE"), auth.get("login_failure_mode")) or "narrow"
        ).lower(),
    )


__all__ = ["JWT_ALGORITHMS", "LOGIN_FAILURE_MODES", "Settings", "load_settings", "resolve_config_path"]
