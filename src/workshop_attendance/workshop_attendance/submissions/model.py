from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import AssignmentType


@dataclass(frozen=True)
class Submission:
    submission_id: int
    register_number: str
    session_id: int
    assignment_title: str
    assignment_type: AssignmentType
    submitted_at: datetime
    response: Optional[str] = None
    files: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.submission_id,
            "registerNumber": self.register_number,
            "sessionId": self.session_id,
            "assignmentTitle": self.assignment_title,
            "assignmentType": self.assignment_type.value,
            "response": self.response,
            "files": list(self.files),
            "submittedAt": to_iso(self.submitted_at),
        }


def distinct_titles(submissions) -> list[str]:
    """Submitted assignment titles, first-seen order, duplicates dropped."""
    return list(dict.fromkeys(s.assignment_title for s in submissions))
