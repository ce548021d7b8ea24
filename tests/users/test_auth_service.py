from datetime import datetime, timedelta, timezone

import pytest

from src.workshop_attendance.workshop_attendance.core.exceptions import (
    AccountLockedError,
    AuthenticationError,
    ValidationError,
)
from src.workshop_attendance.workshop_attendance.users.security import TokenService

NOW = datetime(2026, 3, 2, 9, 0, 0)


def test_login_by_register_number_any_case(container, repos, student):
    result = container.auth_service.login("9924005056", "07042007", now=NOW)

    assert result.user.user_id == student.user_id
    assert container.auth_service.resolve_token(result.token).user_id == student.user_id
    assert repos.users.get_by_id(student.user_id).last_active == NOW


def test_login_by_email_is_case_insensitive(container, admin):
    result = container.auth_service.login("Admin@Workshop.Local", "admin-pass", now=NOW)

    assert result.user.is_admin


def test_wrong_password_counts_attempts_and_locks(container, repos, student):
    for _ in range(3):
        with pytest.raises(AuthenticationError):
            container.auth_service.login(student.register_number, "wrong", now=NOW)

    locked = repos.users.get_by_id(student.user_id)
    assert locked.lock_until == NOW + timedelta(minutes=15)

    with pytest.raises(AccountLockedError):
        container.auth_service.login(student.register_number, "07042007", now=NOW + timedelta(minutes=1))


def test_lock_expires(container, repos, student):
    for _ in range(3):
        with pytest.raises(AuthenticationError):
            container.auth_service.login(student.register_number, "wrong", now=NOW)

    result = container.auth_service.login(student.register_number, "07042007", now=NOW + timedelta(minutes=16))

    assert result.user.user_id == student.user_id
    assert repos.users.get_by_id(student.user_id).login_attempts == 0


def test_unknown_user(container):
    with pytest.raises(AuthenticationError):
        container.auth_service.login("NOBODY", "secret", now=NOW)


def test_missing_password(container, student):
    with pytest.raises(ValidationError) as exc:
        container.auth_service.login(student.register_number, "", now=NOW)
    assert exc.value.field == "password"


def test_change_password(container, student):
    container.auth_service.change_password(
        user_id=student.user_id, current_password="07042007", new_password="new-secret"
    )

    assert container.auth_service.login(student.register_number, "new-secret", now=NOW)


def test_change_password_rejects_short_password(container, student):
    with pytest.raises(ValidationError):
        container.auth_service.change_password(user_id=student.user_id, current_password="07042007", new_password="abc")


def test_token_from_other_secret_is_rejected():
    token = TokenService("other-secret").issue(7)

    assert TokenService("test-jwt-secret").verify(token) is None


def test_expired_token_is_rejected():
    tokens = TokenService("test-jwt-secret", expire_hours=1)
    token = tokens.issue(7, now=datetime.now(timezone.utc) - timedelta(hours=2))

    assert tokens.verify(token) is None
    assert tokens.verify(tokens.issue(7)) == 7
