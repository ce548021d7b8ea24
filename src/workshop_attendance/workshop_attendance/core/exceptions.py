from __future__ import annotations

from typing import Optional

from .enums import DENY_MESSAGES, DenyReason


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class AuthenticationError(DomainError):
    """Raised when login credentials or tokens are invalid."""


class AccountLockedError(AuthenticationError):
    """Raised while an account is locked after too many failed logins."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced day, session or user does not exist."""


class EligibilityDenied(DomainError):
    """Raised when the gate refuses a student write."""

    def __init__(self, reason: DenyReason, message: Optional[str] = None):
        super().__init__(message or DENY_MESSAGES[reason])
        self.reason = reason


class DuplicateRecordError(DomainError):
    """Raised by repositories when a unique key is violated."""


class UploadError(DomainError):
    """Raised when the object storage cannot accept a file."""


class ServiceUnavailableError(DomainError):
    """Raised when the data store or another dependency is unreachable."""
