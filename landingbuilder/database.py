"""SQLite-backed persistence for user accounts."""
from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from .errors import DuplicateAccountError
from .models import User

logger = logging.getLogger("landingbuilder.database")


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the application database."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "landing.sqlite3").resolve(strict=False)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _serialize_datetime(value: datetime) -> str:
    return value.isoformat()


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


class Database:
    """Simple wrapper around SQLite acting as the user repository."""

    def __init__(self, path: Path) -> None:
        _ensure_directory(path)
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    email TEXT NOT NULL UNIQUE,
                    password TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS user_roles (
                    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
                    position INTEGER NOT NULL,
                    role TEXT NOT NULL,
                    PRIMARY KEY (user_id, position)
                );
                """
            )

    # ------------------------------------------------------------------
    # User management
    # ------------------------------------------------------------------
    def exists_by_email(self, email: str) -> bool:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM users WHERE email = ?",
                (normalize_email(email),),
            ).fetchone()
        return row is not None

    def save(self, user: User) -> int:
        """Insert ``user`` together with its roles and return the new id.

        The ``id`` and ``created_at`` fields of ``user`` are ignored. A unique
        constraint violation on the email is reported as
        :class:`DuplicateAccountError`.
        """

        email = normalize_email(user.email)
        created_at = user.created_at or _current_timestamp()

        with self._connect() as conn:
            try:
                cursor = conn.execute(
                    "INSERT INTO users (email, password, created_at) VALUES (?, ?, ?)",
                    (email, user.password, _serialize_datetime(created_at)),
                )
            except sqlite3.IntegrityError as exc:
                raise DuplicateAccountError(email) from exc

            user_id = cursor.lastrowid
            conn.executemany(
                "INSERT INTO user_roles (user_id, position, role) VALUES (?, ?, ?)",
                [(user_id, position, role) for position, role in enumerate(user.roles)],
            )

        logger.debug("Stored user #%s with roles %s", user_id, ", ".join(user.roles))
        return user_id

    def get_user(self, user_id: int) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            if row is None:
                return None
            roles = self._fetch_roles(conn, row["id"])
        return self._row_to_user(row, roles)

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE email = ?",
                (normalize_email(email),),
            ).fetchone()
            if row is None:
                return None
            roles = self._fetch_roles(conn, row["id"])
        return self._row_to_user(row, roles)

    def list_users(self) -> List[User]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM users ORDER BY id").fetchall()
            return [self._row_to_user(row, self._fetch_roles(conn, row["id"])) for row in rows]

    def count_users(self) -> int:
        with self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) AS total FROM users").fetchone()
        return int(row["total"])

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _fetch_roles(conn: sqlite3.Connection, user_id: int) -> Sequence[str]:
        rows = conn.execute(
            "SELECT role FROM user_roles WHERE user_id = ? ORDER BY position",
            (user_id,),
        ).fetchall()
        return [row["role"] for row in rows]

    @staticmethod
    def _row_to_user(row: sqlite3.Row, roles: Sequence[str]) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            password=row["password"],
            roles=tuple(roles),
            created_at=_parse_datetime(row["created_at"]),
        )


__all__ = ["Database", "normalize_email", "resolve_database_path"]
