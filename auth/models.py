"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in profiles/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/ or profiles/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered Skillfolio account.

    email is stored lower-cased and is unique across all users.
    hashed_password is a bcrypt hash -- the raw password is never persisted.
    avatar is a deterministic placeholder URL derived from name at signup.
    """

    name: str
    email: str
    hashed_password: str
    avatar: str = ""
    id: int | None = None
    created_at: str | None = None

    def public_fields(self) -> dict:
        """Fields safe to hand back to clients (never the password hash)."""
        return {"id": self.id, "name": self.name, "email": self.email, "avatar": self.avatar}
