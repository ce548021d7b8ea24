from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import AssignmentType
from .model import Submission


class SubmissionRepository(Protocol):
    def insert(
        self,
        *,
        register_number: str,
        session_id: int,
        assignment_title: str,
        assignment_type: AssignmentType,
        response: Optional[str],
        files: Sequence[str],
        submitted_at: datetime,
    ) -> int:
        """No uniqueness: a re-submission adds another row."""

        raise NotImplementedError

    def list_for_student(self, register_number: str, *, session_id: Optional[int] = None) -> Sequence[Submission]:
        raise NotImplementedError

    def list_for_students(self, register_numbers: Iterable[str]) -> Sequence[Submission]:
        raise NotImplementedError
