from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import DEFAULT_DIVISION
from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Profile of an intern or administrator.

    Login secrets are not part of the profile; they live in AuthAccount.
    """

    user_id: str
    name: str
    username: str
    role: Role
    email: Optional[str] = None
    division: Optional[str] = None
    profile_photo_url: Optional[str] = None

    @property
    def division_or_default(self) -> str:
        return self.division or DEFAULT_DIVISION

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.name,
            "username": self.username,
            "email": self.email,
            "role": self.role.value,
            "division": self.division,
            "profilePhotoUrl": self.profile_photo_url,
        }


@dataclass(frozen=True)
class AuthAccount:
    """Login identity; ``account_id`` equals the profile's ``user_id``."""

    account_id: str
    email: str
    password_hash: str
