from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import to_iso
from ..common.validators import optional_text, parse_positive_int
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.exceptions import ValidationError
from ..days.repository import DayRepository
from ..sessions.repository import SessionRepository
from ..submissions.repository import SubmissionRepository
from ..users.repository import UserRepository


@dataclass(frozen=True)
class ProgressQuery:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    search: Optional[str] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @staticmethod
    def parse(args: dict[str, Any]) -> "ProgressQuery":
        page = parse_positive_int(args.get("page"), "page", default=1)
        limit = parse_positive_int(args.get("limit"), "limit", default=DEFAULT_PAGE_SIZE)
        if limit > MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be at most {MAX_PAGE_SIZE}", field="limit")
        return ProgressQuery(page=page, limit=limit, search=optional_text(args.get("search")))


class ProgressService:
    """Student x session matrix of attendance and distinct assignment completion.

    Paginated over students only; every page carries all sessions.
    """

    def __init__(
        self,
        users: UserRepository,
        sessions: SessionRepository,
        days: DayRepository,
        attendance: AttendanceRepository,
        submissions: SubmissionRepository,
    ):
        self._users = users
        self._sessions = sessions
        self._days = days
        self._attendance = attendance
        self._submissions = submissions

    def progress(self, query: ProgressQuery) -> dict:
        students, total = self._users.list_students_page(offset=query.offset, limit=query.limit, search=query.search)
        sessions = list(self._sessions.list_all())
        days = {d.day_id: d for d in self._days.list_all()}
        defined = {s.session_id: {a.title for a in s.assignments} for s in sessions}

        numbers = [s.register_number for s in students]
        marks = {(r.register_number, r.session_id): r for r in self._attendance.list_for_students(numbers)}
        titles: dict[tuple[str, int], set[str]] = defaultdict(set)
        for sub in self._submissions.list_for_students(numbers):
            titles[(sub.register_number, sub.session_id)].add(sub.assignment_title)

        rows = []
        for student in students:
            per_session = []
            for session in sessions:
                key = (student.register_number, session.session_id)
                completed = titles.get(key, set()) & defined[session.session_id]
                record = marks.get(key)
                day = days.get(session.day_id)
                per_session.append(
                    {
                        "sessionId": session.session_id,
                        "sessionTitle": session.title,
                        "dayNumber": day.day_number if day else None,
                        "dayTitle": day.title if day else None,
                        "attendance": (
                            {
                                "status": record.status.value,
                                "isOverride": record.is_override,
                                "overrideComment": record.override_comment,
                                "timestamp": to_iso(record.marked_at),
                                "photoUrl": record.photo_url,
                            }
                            if record
                            else None
                        ),
                        "assignmentsCompleted": len(completed),
                        "totalAssignments": len(session.assignments),
                    }
                )
            rows.append(
                {
                    "registerNumber": student.register_number,
                    "name": student.name,
                    "yearOfStudy": student.year_of_study,
                    "department": student.department,
                    "sessions": per_session,
                }
            )

        return {
            "students": rows,
            "pagination": {
                "total": total,
                "pages": math.ceil(total / query.limit) if total else 0,
                "currentPage": query.page,
                "limit": query.limit,
            },
        }
