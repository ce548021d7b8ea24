from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for route guards."""

    STUDENT = "student"
    ADMIN = "admin"


class DayStatus(str, Enum):
    """Admin-controlled gate on a day and every session under it."""

    LOCKED = "LOCKED"
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class SessionMode(str, Enum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


class SessionType(str, Enum):
    SESSION = "SESSION"
    BREAK = "BREAK"


class AssignmentType(str, Enum):
    TEXT = "text"
    FILE = "file"
    LINK = "link"
    # Submittable without attendance, see eligibility rules.
    CERTIFICATE = "certificate"


class AttendanceStatus(str, Enum):
    """ABSENT is never stored: absence is the lack of a row."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"


class WindowStatus(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    CLOSED = "closed"


class DenyReason(str, Enum):
    """Typed outcomes of the attendance/assignment gate."""

    DAY_NOT_OPEN = "DAY_NOT_OPEN"
    WINDOW_NOT_ACTIVE = "WINDOW_NOT_ACTIVE"
    ALREADY_MARKED = "ALREADY_MARKED"
    PHOTO_REQUIRED = "PHOTO_REQUIRED"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    ASSIGNMENT_NOT_FOUND = "ASSIGNMENT_NOT_FOUND"
    ATTENDANCE_REQUIRED = "ATTENDANCE_REQUIRED"
    CERTIFICATE_UPLOAD_CLOSED = "CERTIFICATE_UPLOAD_CLOSED"
    PAYLOAD_REQUIRED = "PAYLOAD_REQUIRED"


DENY_MESSAGES: dict[DenyReason, str] = {
    DenyReason.DAY_NOT_OPEN: "This day is not open",
    DenyReason.WINDOW_NOT_ACTIVE: "Attendance window is not active for this session",
    DenyReason.ALREADY_MARKED: "Attendance already marked for this session",
    DenyReason.PHOTO_REQUIRED: "Photo is required for attendance",
    DenyReason.SESSION_NOT_FOUND: "Session not found",
    DenyReason.ASSIGNMENT_NOT_FOUND: "Assignment not found for this session",
    DenyReason.ATTENDANCE_REQUIRED: "You must mark attendance before submitting assignments",
    DenyReason.CERTIFICATE_UPLOAD_CLOSED: "Certificate upload is not open for this session",
    DenyReason.PAYLOAD_REQUIRED: "Assignment response is required",
}
