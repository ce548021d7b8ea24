from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get(self, register_number: str, session_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def has_present(self, register_number: str, session_id: int) -> bool:
        raise NotImplementedError

    def insert(self, *, register_number: str, session_id: int, photo_url: str, marked_at: datetime) -> int:
        """Raises DuplicateRecordError when the student already has a row for the session."""

        raise NotImplementedError

    def upsert_override(
        self,
        *,
        register_number: str,
        session_id: int,
        comment: str,
        override_by: str,
        now: datetime,
    ) -> AttendanceRecord:
        raise NotImplementedError

    def list_for_student(self, register_number: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_students(self, register_numbers: Iterable[str]) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
