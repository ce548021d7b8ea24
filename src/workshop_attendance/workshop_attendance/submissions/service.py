from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..cache.response_cache import MutationKind, ResponseCache
from ..common.datetime_utils import utc_now
from ..common.validators import optional_text, parse_positive_int, require_enum, require_non_empty
from ..core.constants import ASSIGNMENT_FOLDER
from ..core.enums import AssignmentType, DenyReason
from ..core.exceptions import EligibilityDenied, ValidationError
from ..eligibility.base import EligibilityContext, evaluate
from ..eligibility.factory import GateRuleFactory
from ..sessions.repository import SessionRepository
from ..storage.object_storage import FilePayload, ObjectStorage
from ..users.model import User
from .model import Submission
from .repository import SubmissionRepository

logger = logging.getLogger(__name__)


class SubmissionService:
    def __init__(
        self,
        submissions: SubmissionRepository,
        sessions: SessionRepository,
        attendance: AttendanceRepository,
        storage: ObjectStorage,
        cache: ResponseCache,
        *,
        rules: Optional[GateRuleFactory] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._submissions = submissions
        self._sessions = sessions
        self._attendance = attendance
        self._storage = storage
        self._cache = cache
        self._rules = rules or GateRuleFactory()
        self._clock = clock

    def submit(
        self,
        *,
        user: User,
        session_id: Any,
        assignment_title: Any,
        assignment_type: Any = None,
        response: Any = None,
        files: Sequence[FilePayload] = (),
        now: Optional[datetime] = None,
    ) -> Submission:
        """Record one submission for an assignment defined on the session.

        The assignment's type comes from the session, never from the request;
        a request that names a different type is rejected.
        """
        now = now or self._clock()
        sid = parse_positive_int(session_id, "sessionId")
        title = require_non_empty(assignment_title, "assignmentTitle")
        text = optional_text(response)
        files = [f for f in files if f is not None and f.data]

        session = self._sessions.get_by_id(sid)
        assignment = session.find_assignment(title) if session else None
        if assignment is not None and optional_text(assignment_type) is not None:
            claimed = require_enum(optional_text(assignment_type), AssignmentType, "assignmentType")
            if claimed != assignment.type:
                raise ValidationError(
                    f"assignmentType must be {assignment.type.value} for {title!r}", field="assignmentType"
                )

        ctx = EligibilityContext(
            register_number=user.register_number,
            now=now,
            attendance=self._attendance,
            session=session,
            assignment=assignment,
            payload_supplied=bool(text or files),
        )
        evaluate(self._rules.for_submission(assignment), ctx).raise_if_denied()
        kind = assignment.type

        urls = [self._storage.upload(f.data, f.mime_type, ASSIGNMENT_FOLDER, filename=f.filename) for f in files]
        if not text and not urls:
            raise EligibilityDenied(DenyReason.PAYLOAD_REQUIRED)

        submission_id = self._submissions.insert(
            register_number=user.register_number,
            session_id=sid,
            assignment_title=title,
            assignment_type=kind,
            response=text,
            files=urls,
            submitted_at=now,
        )
        self._cache.invalidate(MutationKind.ASSIGNMENT_SUBMITTED)
        logger.info("Assignment %r submitted by %s for session %s", title, user.register_number, sid)
        return Submission(
            submission_id=submission_id,
            register_number=user.register_number,
            session_id=sid,
            assignment_title=title,
            assignment_type=kind,
            response=text,
            files=tuple(urls),
            submitted_at=now,
        )
