from __future__ import annotations

from typing import Optional

from ..core.enums import AssignmentType, DenyReason
from ..sessions.window import accepts_marks
from .base import EligibilityContext, EligibilityRule


class SessionExistsRule(EligibilityRule):
    def check(self, ctx: EligibilityContext) -> Optional[DenyReason]:
        return DenyReason.SESSION_NOT_FOUND if ctx.session is None else None


class DayOpenRule(EligibilityRule):
    def check(self, ctx: EligibilityContext) -> Optional[DenyReason]:
        if ctx.day is None or not ctx.day.is_open:
            return DenyReason.DAY_NOT_OPEN
        return None


class WindowActiveRule(EligibilityRule):
    """Flag set and end not passed, whatever the lazy closer has done so far."""

    def check(self, ctx: EligibilityContext) -> Optional[DenyReason]:
        if ctx.session is None or not accepts_marks(ctx.session, ctx.now):
            return DenyReason.WINDOW_NOT_ACTIVE
        return None


class NotAlreadyMarkedRule(EligibilityRule):
    def check(self, ctx: EligibilityContext) -> Optional[DenyReason]:
        if ctx.attendance.get(ctx.register_number, ctx.session.session_id) is not None:
            return DenyReason.ALREADY_MARKED
        return None


class PhotoSuppliedRule(EligibilityRule):
    def check(self, ctx: EligibilityContext) -> Optional[DenyReason]:
        return None if ctx.photo_supplied else DenyReason.PHOTO_REQUIRED


class AssignmentDefinedRule(EligibilityRule):
    """The title must name an assignment defined on the session."""

    def check(self, ctx: EligibilityContext) -> Optional[DenyReason]:
        return DenyReason.ASSIGNMENT_NOT_FOUND if ctx.assignment is None else None


class AttendanceRequiredRule(EligibilityRule):
    def check(self, ctx: EligibilityContext) -> Optional[DenyReason]:
        if not ctx.attendance.has_present(ctx.register_number, ctx.session.session_id):
            return DenyReason.ATTENDANCE_REQUIRED
        return None


class CertificateUploadOpenRule(EligibilityRule):
    def check(self, ctx: EligibilityContext) -> Optional[DenyReason]:
        return None if ctx.session.certificate_upload_open else DenyReason.CERTIFICATE_UPLOAD_CLOSED


class PayloadSuppliedRule(EligibilityRule):
    def check(self, ctx: EligibilityContext) -> Optional[DenyReason]:
        return None if ctx.payload_supplied else DenyReason.PAYLOAD_REQUIRED


def is_certificate(assignment_type: Optional[AssignmentType]) -> bool:
    return assignment_type == AssignmentType.CERTIFICATE
