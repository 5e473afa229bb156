"""Domain models for the landing builder backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

DEFAULT_ROLE = "USER"


@dataclass(frozen=True)
class User:
    """Represents an account stored in the user database.

    ``password`` always holds the hashed form. ``id`` and ``created_at`` are
    assigned by the database when the record is saved.
    """

    email: str
    password: str
    roles: Tuple[str, ...] = field(default=(DEFAULT_ROLE,))
    id: Optional[int] = None
    created_at: Optional[datetime] = None


__all__ = ["DEFAULT_ROLE", "User"]
