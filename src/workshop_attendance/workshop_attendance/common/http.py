"""Request-boundary helpers shared by the feature controllers."""
from __future__ import annotations

import logging
from typing import Any, Optional

from flask import jsonify, request

from ..core.enums import DenyReason
from ..core.exceptions import (
    AccountLockedError,
    AuthenticationError,
    AuthorizationError,
    DomainError,
    EligibilityDenied,
    NotFoundError,
    ServiceUnavailableError,
    UploadError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_DENY_STATUS = {
    DenyReason.ALREADY_MARKED: 409,
    DenyReason.PHOTO_REQUIRED: 400,
    DenyReason.PAYLOAD_REQUIRED: 400,
    DenyReason.SESSION_NOT_FOUND: 404,
    DenyReason.ASSIGNMENT_NOT_FOUND: 404,
}


def status_for(exc: DomainError) -> int:
    if isinstance(exc, EligibilityDenied):
        return _DENY_STATUS.get(exc.reason, 403)
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, AccountLockedError):
        return 423
    if isinstance(exc, AuthenticationError):
        return 401
    if isinstance(exc, AuthorizationError):
        return 403
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, UploadError):
        return 502
    if isinstance(exc, ServiceUnavailableError):
        return 503
    return 400


def error_response(exc: DomainError):
    body: dict[str, Any] = {"success": False, "message": str(exc)}
    if isinstance(exc, EligibilityDenied):
        body["reason"] = exc.reason.value
    if isinstance(exc, ValidationError) and exc.field:
        body["field"] = exc.field
    if isinstance(exc, (UploadError, ServiceUnavailableError)):
        logger.error("%s %s failed: %s", request.method, request.path, exc)
    return jsonify(body), status_for(exc)


def server_error(action: str):
    logger.exception("Unexpected error while %s", action)
    return jsonify({"success": False, "message": f"Server error {action}"}), 500


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def form_or_json() -> dict:
    """Multipart requests carry fields in the form, JSON requests in the body."""
    if request.form:
        return request.form.to_dict()
    return json_body()


def bearer_token(header: Optional[str]) -> Optional[str]:
    if header and header.startswith("Bearer "):
        return header.split(" ", 1)[1].strip() or None
    return None
