from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from ..cache.response_cache import MutationKind, ResponseCache
from ..common.datetime_utils import utc_now
from ..common.validators import normalize_register_number, parse_positive_int, require_non_empty
from ..core.constants import ATTENDANCE_PHOTO_FOLDER
from ..core.enums import DenyReason
from ..core.exceptions import DuplicateRecordError, EligibilityDenied, NotFoundError
from ..days.repository import DayRepository
from ..eligibility.base import EligibilityContext, evaluate
from ..eligibility.factory import GateRuleFactory
from ..sessions.repository import SessionRepository
from ..storage.object_storage import FilePayload, ObjectStorage
from ..submissions.repository import SubmissionRepository
from ..users.model import User
from ..users.repository import UserRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudentProfile:
    student: User
    attendance: list[AttendanceRecord]
    submissions: list
    session_titles: dict[int, str]

    def to_dict(self) -> dict:
        def with_title(item: dict) -> dict:
            item["sessionTitle"] = self.session_titles.get(item["sessionId"])
            return item

        return {
            "student": self.student.to_public_dict(),
            "attendanceCount": len(self.attendance),
            "assignmentsSubmitted": len(self.submissions),
            "attendanceRecords": [with_title(r.to_dict()) for r in self.attendance],
            "submissions": [with_title(s.to_dict()) for s in self.submissions],
        }


class AttendanceService:
    """Use case: students mark attendance through the gate; admins override it."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        days: DayRepository,
        users: UserRepository,
        submissions: SubmissionRepository,
        storage: ObjectStorage,
        cache: ResponseCache,
        *,
        rules: Optional[GateRuleFactory] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._days = days
        self._users = users
        self._submissions = submissions
        self._storage = storage
        self._cache = cache
        self._rules = rules or GateRuleFactory()
        self._clock = clock

    def mark(
        self,
        *,
        user: User,
        session_id: Any,
        photo: Optional[FilePayload],
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or self._clock()
        sid = parse_positive_int(session_id, "sessionId")
        session = self._sessions.get_by_id(sid)
        day = self._days.get_by_id(session.day_id) if session else None

        ctx = EligibilityContext(
            register_number=user.register_number,
            now=now,
            attendance=self._attendance,
            session=session,
            day=day,
            photo_supplied=photo is not None and bool(photo.data),
        )
        evaluate(self._rules.for_attendance(), ctx).raise_if_denied()

        photo_url = self._storage.upload(photo.data, photo.mime_type, ATTENDANCE_PHOTO_FOLDER, filename=photo.filename)
        try:
            attendance_id = self._attendance.insert(
                register_number=user.register_number, session_id=sid, photo_url=photo_url, marked_at=now
            )
        except DuplicateRecordError:
            # Lost the race against a concurrent mark; the store's unique key decides.
            # The photo already uploaded stays in storage unreferenced.
            logger.warning(
                "Duplicate attendance mark for %s in session %s, orphaned photo %s",
                user.register_number,
                sid,
                photo_url,
            )
            raise EligibilityDenied(DenyReason.ALREADY_MARKED)

        self._cache.invalidate(MutationKind.ATTENDANCE_MARKED)
        return AttendanceRecord(
            attendance_id=attendance_id,
            register_number=user.register_number,
            session_id=sid,
            marked_at=now,
            photo_url=photo_url,
        )

    def override(
        self,
        *,
        admin: User,
        register_number: Any,
        session_id: Any,
        comment: Any,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or self._clock()
        reg = normalize_register_number(register_number)
        sid = parse_positive_int(session_id, "sessionId")
        comment = require_non_empty(comment, "comment")

        if not self._users.get_by_register_number(reg):
            raise NotFoundError("Student not found")
        if not self._sessions.get_by_id(sid):
            raise NotFoundError("Session not found")

        record = self._attendance.upsert_override(
            register_number=reg, session_id=sid, comment=comment, override_by=admin.identity, now=now
        )
        self._cache.invalidate(MutationKind.ATTENDANCE_OVERRIDDEN)
        logger.info("Attendance override for %s in session %s by %s", reg, sid, admin.identity)
        return record

    def profile(self, user: User) -> StudentProfile:
        student = self._users.get_by_id(user.user_id)
        if not student:
            raise NotFoundError("Student not found")

        titles = {s.session_id: s.title for s in self._sessions.list_all()}
        return StudentProfile(
            student=student,
            attendance=list(self._attendance.list_for_student(student.register_number)),
            submissions=list(self._submissions.list_for_student(student.register_number)),
            session_titles=titles,
        )
