from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..sessions.model import Assignment
from .base import EligibilityRule
from .rules import (
    AssignmentDefinedRule,
    AttendanceRequiredRule,
    CertificateUploadOpenRule,
    DayOpenRule,
    NotAlreadyMarkedRule,
    PayloadSuppliedRule,
    PhotoSuppliedRule,
    SessionExistsRule,
    WindowActiveRule,
    is_certificate,
)


@dataclass
class GateRuleFactory:
    """Builds the ordered rule chain for each kind of student write."""

    def for_attendance(self) -> list[EligibilityRule]:
        return [
            SessionExistsRule(),
            DayOpenRule(),
            WindowActiveRule(),
            NotAlreadyMarkedRule(),
            PhotoSuppliedRule(),
        ]

    def for_submission(self, assignment: Optional[Assignment]) -> list[EligibilityRule]:
        """Chain for a submission against the session's own assignment definition."""
        rules: list[EligibilityRule] = [SessionExistsRule(), AssignmentDefinedRule()]
        if assignment is not None and is_certificate(assignment.type):
            # Certificates are accepted without attendance while the upload is open.
            rules.append(CertificateUploadOpenRule())
        else:
            rules.append(AttendanceRequiredRule())
        rules.append(PayloadSuppliedRule())
        return rules
