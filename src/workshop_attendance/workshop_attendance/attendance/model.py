from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """One row per (student, session). Absence is the lack of a row."""

    attendance_id: int
    register_number: str
    session_id: int
    marked_at: datetime
    status: AttendanceStatus = AttendanceStatus.PRESENT
    photo_url: Optional[str] = None
    is_override: bool = False
    override_comment: Optional[str] = None
    override_by: Optional[str] = None

    @property
    def is_present(self) -> bool:
        return self.status == AttendanceStatus.PRESENT

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "registerNumber": self.register_number,
            "sessionId": self.session_id,
            "status": self.status.value,
            "photoUrl": self.photo_url,
            "timestamp": to_iso(self.marked_at),
            "isOverride": self.is_override,
            "overrideComment": self.override_comment,
            "overrideBy": self.override_by,
        }
