from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from ..attendance.repository import AttendanceRepository
from ..cache.response_cache import MutationKind, ResponseCache
from ..common.datetime_utils import parse_iso_datetime, to_iso, utc_now
from ..common.validators import optional_text, parse_bool, parse_positive_int, require_enum, require_non_empty
from ..core.constants import DEFAULT_ATTENDANCE_WINDOW_MINUTES
from ..core.enums import AssignmentType, DenyReason, SessionMode, SessionType
from ..core.exceptions import EligibilityDenied, NotFoundError, ValidationError
from ..days.model import Day
from ..days.repository import DayRepository
from ..submissions.model import distinct_titles
from ..submissions.repository import SubmissionRepository
from ..users.model import User
from .closer import LazyCloser
from .model import Assignment, Session
from .repository import SessionRepository
from .window import effective, is_active, is_expired, start_window, stop_window, window_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowChange:
    session: Session
    window_ends_at: Optional[datetime]

    def to_dict(self) -> dict:
        return {"session": self.session.to_dict(), "windowEndsAt": to_iso(self.window_ends_at)}


def parse_assignments(raw: Any) -> tuple[Assignment, ...]:
    if raw in (None, ""):
        return ()
    if not isinstance(raw, list):
        raise ValidationError("assignments must be a list", field="assignments")

    out: list[Assignment] = []
    seen: set[str] = set()
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError("each assignment must be an object", field="assignments")
        title = require_non_empty(item.get("title"), "assignments.title")
        if title in seen:
            raise ValidationError(f"duplicate assignment title: {title}", field="assignments")
        seen.add(title)
        out.append(
            Assignment(
                title=title,
                type=require_enum(item.get("type"), AssignmentType, "assignments.type"),
                description=optional_text(item.get("description")) or "",
            )
        )
    return tuple(out)


def _optional_datetime(value: Any, field_name: str) -> Optional[datetime]:
    text = optional_text(value)
    if text is None:
        return None
    try:
        return parse_iso_datetime(text)
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO-8601 timestamp", field=field_name)


def _epoch_millis(value: Optional[datetime]) -> int:
    if value is None:
        return 0
    return int(value.replace(tzinfo=timezone.utc).timestamp() * 1000)


class SessionService:
    """Use cases around sessions: admin edits, window start/stop and student reads."""

    def __init__(
        self,
        sessions: SessionRepository,
        days: DayRepository,
        attendance: AttendanceRepository,
        submissions: SubmissionRepository,
        closer: LazyCloser,
        cache: ResponseCache,
        *,
        window_minutes: int = DEFAULT_ATTENDANCE_WINDOW_MINUTES,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._sessions = sessions
        self._days = days
        self._attendance = attendance
        self._submissions = submissions
        self._closer = closer
        self._cache = cache
        self._window = timedelta(minutes=int(window_minutes))
        self._clock = clock

    def _get_session(self, session_id: int) -> Session:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise NotFoundError("Session not found")
        return session

    def _get_day(self, day_id: int) -> Day:
        day = self._days.get_by_id(int(day_id))
        if not day:
            raise NotFoundError("Day not found")
        return day

    # ---- admin ----

    def create_session(self, raw: dict) -> Session:
        day_id = parse_positive_int(raw.get("dayId"), "dayId")
        title = require_non_empty(raw.get("title"), "title")
        self._get_day(day_id)

        mode = require_enum(raw.get("mode") or SessionMode.ONLINE.value, SessionMode, "mode")
        session_type = require_enum(
            raw.get("sessionType") or raw.get("type") or SessionType.SESSION.value, SessionType, "sessionType"
        )
        start_time = _optional_datetime(raw.get("startTime"), "startTime")
        end_time = _optional_datetime(raw.get("endTime"), "endTime")
        if start_time and end_time and end_time < start_time:
            raise ValidationError("endTime must not be before startTime", field="endTime")

        session_id = self._sessions.create(
            day_id=day_id,
            title=title,
            description=optional_text(raw.get("description")) or "",
            mode=mode,
            session_type=session_type,
            assignments=parse_assignments(raw.get("assignments")),
            start_time=start_time,
            end_time=end_time,
        )
        self._cache.invalidate(MutationKind.SESSION_CHANGED)
        logger.info("Session %s created under day %s", session_id, day_id)
        return self._get_session(session_id)

    def update_session(self, session_id: int, raw: dict) -> Session:
        session = self._get_session(session_id)

        fields: dict[str, Any] = {}
        if "title" in raw:
            fields["title"] = require_non_empty(raw.get("title"), "title")
        if "description" in raw:
            fields["description"] = optional_text(raw.get("description")) or ""
        if "mode" in raw:
            fields["mode"] = require_enum(raw.get("mode"), SessionMode, "mode")
        if "sessionType" in raw or "type" in raw:
            fields["session_type"] = require_enum(raw.get("sessionType") or raw.get("type"), SessionType, "sessionType")
        if "assignments" in raw:
            fields["assignments"] = parse_assignments(raw.get("assignments"))
        if "startTime" in raw:
            fields["start_time"] = _optional_datetime(raw.get("startTime"), "startTime")
        if "endTime" in raw:
            fields["end_time"] = _optional_datetime(raw.get("endTime"), "endTime")
        if "isCertificateUploadOpen" in raw:
            fields["certificate_upload_open"] = parse_bool(raw.get("isCertificateUploadOpen"))

        if not fields:
            raise ValidationError("No updatable fields supplied")

        self._sessions.update_fields(session.session_id, fields)
        self._cache.invalidate(MutationKind.SESSION_CHANGED)
        return self._get_session(session.session_id)

    def list_with_days(self, now: Optional[datetime] = None) -> list[dict]:
        now = now or self._clock()
        days = {d.day_id: d for d in self._days.list_all()}
        out = []
        for s in self._sessions.list_all():
            shown = effective(s, now)
            item = shown.to_dict()
            day = days.get(s.day_id)
            item["day"] = day.to_dict() if day else None
            item["attendanceStatus"] = window_status(shown, now).value
            item["isAttendanceActive"] = is_active(shown, now)
            out.append(item)
        return out

    def start_attendance(self, session_id: int, now: Optional[datetime] = None) -> WindowChange:
        now = now or self._clock()
        session = self._get_session(session_id)
        day = self._get_day(session.day_id)
        if not day.is_open:
            raise EligibilityDenied(DenyReason.DAY_NOT_OPEN, "Day must be OPEN to start attendance")

        opened = start_window(session, now, self._window)
        self._sessions.open_window(
            session.session_id, start=opened.attendance_start_time, end=opened.attendance_end_time
        )
        self._cache.invalidate(MutationKind.ATTENDANCE_WINDOW_CHANGED)
        logger.info("Attendance window opened for session %s until %s", session.session_id, to_iso(opened.attendance_end_time))
        stored = self._sessions.get_by_id(session.session_id) or opened
        return WindowChange(session=stored, window_ends_at=opened.attendance_end_time)

    def stop_attendance(self, session_id: int) -> WindowChange:
        session = self._get_session(session_id)
        self._sessions.close_window(session.session_id)
        self._cache.invalidate(MutationKind.ATTENDANCE_WINDOW_CHANGED)
        logger.info("Attendance window stopped for session %s", session.session_id)
        stored = self._sessions.get_by_id(session.session_id) or stop_window(session)
        return WindowChange(session=stored, window_ends_at=stored.attendance_end_time)

    def sync_state(self) -> dict:
        latest = max(_epoch_millis(self._days.latest_update()), _epoch_millis(self._sessions.latest_update()))
        return {"lastUpdate": latest}

    # ---- student ----

    def _require_open_day(self, day_id: int) -> Day:
        day = self._get_day(day_id)
        if not day.is_open:
            raise EligibilityDenied(DenyReason.DAY_NOT_OPEN, "This day is not accessible")
        return day

    def _annotate(self, session: Session, now: datetime, *, has_attendance: bool, titles: list[str]) -> dict:
        item = session.to_dict()
        item.update(
            {
                "hasAttendance": has_attendance,
                "attendanceStatus": window_status(session, now).value,
                "isAttendanceActive": is_active(session, now),
                # Titles the session no longer defines do not count as completed.
                "assignmentsSubmitted": [t for t in titles if session.find_assignment(t) is not None],
                "totalAssignments": len(session.assignments),
            }
        )
        return item

    def sessions_for_day(self, user: User, day_id: int, now: Optional[datetime] = None) -> list[dict]:
        now = now or self._clock()
        self._require_open_day(day_id)
        sessions = self._closer.ensure_fresh(int(day_id), now)

        marked = {r.session_id for r in self._attendance.list_for_student(user.register_number)}
        by_session: dict[int, list] = defaultdict(list)
        for sub in self._submissions.list_for_student(user.register_number):
            by_session[sub.session_id].append(sub)

        return [
            self._annotate(
                s,
                now,
                has_attendance=s.session_id in marked,
                titles=distinct_titles(by_session.get(s.session_id, [])),
            )
            for s in sessions
        ]

    def session_detail(self, user: User, session_id: int, now: Optional[datetime] = None) -> dict:
        now = now or self._clock()
        session = self._get_session(session_id)
        self._require_open_day(session.day_id)
        if is_expired(session, now):
            self._closer.close_expired(now, day_id=session.day_id)
        session = effective(session, now)

        record = self._attendance.get(user.register_number, session.session_id)
        submissions = list(self._submissions.list_for_student(user.register_number, session_id=session.session_id))
        item = self._annotate(session, now, has_attendance=record is not None, titles=distinct_titles(submissions))
        item["attendance"] = record.to_dict() if record else None
        item["submissions"] = [s.to_dict() for s in submissions]
        return item
