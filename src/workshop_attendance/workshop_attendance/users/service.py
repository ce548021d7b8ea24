from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterable, Optional

from ..common.datetime_utils import utc_now
from ..common.validators import (
    normalize_email,
    normalize_register_number,
    optional_text,
    require_min_length,
    require_non_empty,
)
from ..core.constants import DEFAULT_LOCK_MINUTES, DEFAULT_MAX_LOGIN_ATTEMPTS, MIN_PASSWORD_LENGTH, YEARS_OF_STUDY
from ..core.enums import Role
from ..core.exceptions import (
    AccountLockedError,
    AuthenticationError,
    DuplicateRecordError,
    NotFoundError,
    ValidationError,
)
from .model import NewStudent, User
from .repository import UserRepository
from .security import PasswordHasher, TokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User


@dataclass(frozen=True)
class PreloadResult:
    created: list[str]
    errors: list[dict]


class AuthService:
    """Use case: authenticate users and resolve bearer tokens."""

    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenService,
        *,
        max_attempts: int = DEFAULT_MAX_LOGIN_ATTEMPTS,
        lock_minutes: int = DEFAULT_LOCK_MINUTES,
    ):
        self._users = users
        self._hasher = hasher
        self._tokens = tokens
        self._max_attempts = int(max_attempts)
        self._lock_minutes = int(lock_minutes)

    def login(self, username: str, password: str, *, now: Optional[datetime] = None) -> LoginResult:
        now = now or utc_now()
        username = require_non_empty(username, "username")
        if not password:
            raise ValidationError("password is required", field="password")

        user = self._users.get_by_login(username.upper(), username.lower())
        if not user:
            raise AuthenticationError("Invalid credentials")

        if user.is_locked(now):
            raise AccountLockedError("Too many failed attempts, account locked until " + user.lock_until.isoformat(timespec="minutes"))

        if not self._hasher.verify(password, user.password_hash):
            attempts = self._users.record_failed_login(
                user.user_id,
                max_attempts=self._max_attempts,
                lock_until=now + timedelta(minutes=self._lock_minutes),
            )
            if attempts >= self._max_attempts:
                logger.warning("Account %s locked after %s failed logins", user.register_number, attempts)
            raise AuthenticationError("Invalid credentials")

        self._users.record_successful_login(user.user_id, now=now)
        return LoginResult(token=self._tokens.issue(user.user_id), user=user)

    def resolve_token(self, token: str) -> User:
        user_id = self._tokens.verify(token)
        if user_id is None:
            raise AuthenticationError("Not authorized, token failed")

        user = self._users.get_by_id(user_id)
        if not user:
            raise AuthenticationError("User not found")
        return user

    def change_password(self, *, user_id: int, current_password: str, new_password: str) -> None:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        if not self._hasher.verify(current_password or "", user.password_hash):
            raise AuthenticationError("Current password is incorrect")

        require_min_length(new_password, "newPassword", MIN_PASSWORD_LENGTH)
        self._users.update_password_hash(user.user_id, self._hasher.hash(new_password))


class UserService:
    """Use case: manage students (admin)."""

    def __init__(self, users: UserRepository, hasher: PasswordHasher):
        self._users = users
        self._hasher = hasher

    def get(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def parse_student(raw: Any) -> NewStudent:
        if not isinstance(raw, dict):
            raise ValidationError("Each student must be an object")

        year = str(raw.get("yearOfStudy") or "").strip()
        if year not in YEARS_OF_STUDY:
            raise ValidationError("yearOfStudy must be one of 1-4", field="yearOfStudy")

        return NewStudent(
            register_number=normalize_register_number(raw.get("registerNumber")),
            name=require_non_empty(raw.get("name"), "name"),
            password=require_non_empty(raw.get("dateOfBirth"), "dateOfBirth"),
            year_of_study=year,
            department=optional_text(raw.get("department")) or "",
            email=normalize_email(raw.get("email")),
        )

    def preload_students(self, rows: Iterable[Any]) -> PreloadResult:
        created: list[str] = []
        errors: list[dict] = []

        for raw in rows:
            label = raw.get("registerNumber") if isinstance(raw, dict) else None
            try:
                student = self.parse_student(raw)
                if self._users.get_by_register_number(student.register_number):
                    raise DuplicateRecordError("Student already exists")

                self._users.create_user(
                    register_number=student.register_number,
                    name=student.name,
                    password_hash=self._hasher.hash(student.password),
                    role=Role.STUDENT,
                    email=student.email,
                    department=student.department,
                    year_of_study=student.year_of_study,
                )
                created.append(student.register_number)
            except (ValidationError, DuplicateRecordError) as e:
                errors.append({"registerNumber": label, "error": str(e)})

        logger.info("Student preload: %s created, %s rejected", len(created), len(errors))
        return PreloadResult(created=created, errors=errors)
