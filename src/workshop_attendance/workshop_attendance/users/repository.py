from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_register_number(self, register_number: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_login(self, register_number: str, email: str) -> Optional[User]:
        """Match either the upper-cased register number or the lower-cased email."""

        raise NotImplementedError

    def create_user(
        self,
        *,
        register_number: str,
        name: str,
        password_hash: str,
        role: Role,
        email: Optional[str] = None,
        department: str = "",
        year_of_study: Optional[str] = None,
    ) -> int:
        """Raises DuplicateRecordError when the register number or email is taken."""

        raise NotImplementedError

    def record_failed_login(self, user_id: int, *, max_attempts: int, lock_until: datetime) -> int:
        """Increment the attempt counter; lock when it reaches max_attempts. Returns the new count."""

        raise NotImplementedError

    def record_successful_login(self, user_id: int, *, now: datetime) -> None:
        raise NotImplementedError

    def update_password_hash(self, user_id: int, password_hash: str) -> bool:
        raise NotImplementedError

    def list_students_page(self, *, offset: int, limit: int, search: Optional[str] = None) -> tuple[Sequence[User], int]:
        """Students ordered by register number, plus the total matching count."""

        raise NotImplementedError
