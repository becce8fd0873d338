"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and services do
the work; these own the domain shape.

Layer rule: no imports from api/ or tasks/.
"""

from __future__ import annotations

from dataclasses import dataclass

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)

# local@domain.tld with no whitespace; same rule for registration and updates.
EMAIL_PATTERN = r"^\S+@\S+\.\S+$"


@dataclass
class User:
    """A persisted account.

    email is stored lower-cased so uniqueness is case-insensitive at the
    database level. hashed_password is a bcrypt hash, never the plaintext.
    id is None before the record is written to the database.
    """

    name: str
    email: str
    hashed_password: str
    role: str = ROLE_USER  # "user" | "admin"
    id: int | None = None
    created_at: str | None = None  # ISO 8601, set by store on insert
    updated_at: str | None = None


@dataclass(frozen=True)
class Identity:
    """The resolved caller of a request.

    This is what the auth core hands downstream. It has no password hash
    field.
    """

    id: int
    name: str
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
