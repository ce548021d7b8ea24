from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import to_iso
from ..core.enums import AssignmentType, SessionMode, SessionType


@dataclass(frozen=True)
class Assignment:
    """Embedded assignment definition; identified by title within its session."""

    title: str
    type: AssignmentType
    description: str = ""

    def to_dict(self) -> dict:
        return {"title": self.title, "type": self.type.value, "description": self.description}

    @staticmethod
    def from_dict(raw: dict[str, Any]) -> "Assignment":
        return Assignment(
            title=str(raw.get("title") or "").strip(),
            type=AssignmentType(raw.get("type") or AssignmentType.TEXT.value),
            description=str(raw.get("description") or ""),
        )


@dataclass(frozen=True)
class Session:
    session_id: int
    day_id: int
    title: str
    description: str = ""
    mode: SessionMode = SessionMode.ONLINE
    session_type: SessionType = SessionType.SESSION
    attendance_open: bool = False
    attendance_start_time: Optional[datetime] = None
    attendance_end_time: Optional[datetime] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    assignments: tuple[Assignment, ...] = field(default_factory=tuple)
    certificate_upload_open: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def find_assignment(self, title: str) -> Optional[Assignment]:
        for a in self.assignments:
            if a.title == title:
                return a
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.session_id,
            "dayId": self.day_id,
            "title": self.title,
            "description": self.description,
            "mode": self.mode.value,
            "sessionType": self.session_type.value,
            "attendanceOpen": self.attendance_open,
            "attendanceStartTime": to_iso(self.attendance_start_time),
            "attendanceEndTime": to_iso(self.attendance_end_time),
            "startTime": to_iso(self.start_time),
            "endTime": to_iso(self.end_time),
            "assignments": [a.to_dict() for a in self.assignments],
            "isCertificateUploadOpen": self.certificate_upload_open,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }
