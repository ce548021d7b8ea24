from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a student or an admin.

    Note: plain data object (no DB access code). `register_number` is stored
    upper-cased, `email` lower-cased.
    """

    user_id: int
    register_number: str
    name: str
    password_hash: str
    role: Role
    email: Optional[str] = None
    department: str = ""
    year_of_study: Optional[str] = None
    login_attempts: int = 0
    lock_until: Optional[datetime] = None
    last_active: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def is_locked(self, now: datetime) -> bool:
        return self.lock_until is not None and self.lock_until > now

    @property
    def identity(self) -> str:
        """Identity recorded on admin actions (email when known)."""
        return self.email or self.register_number

    def to_public_dict(self) -> dict:
        return {
            "id": self.user_id,
            "registerNumber": self.register_number,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "yearOfStudy": self.year_of_study,
            "department": self.department,
            "lastActive": to_iso(self.last_active),
        }


@dataclass(frozen=True)
class NewStudent:
    """Validated preload row."""

    register_number: str
    name: str
    password: str
    year_of_study: str
    department: str = ""
    email: Optional[str] = None
