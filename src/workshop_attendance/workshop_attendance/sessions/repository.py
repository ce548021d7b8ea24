from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import SessionMode, SessionType
from .model import Assignment, Session


class SessionRepository(Protocol):
    def get_by_id(self, session_id: int) -> Optional[Session]:
        raise NotImplementedError

    def list_for_day(self, day_id: int) -> Sequence[Session]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Session]:
        """All sessions ordered by creation."""

        raise NotImplementedError

    def create(
        self,
        *,
        day_id: int,
        title: str,
        description: str,
        mode: SessionMode,
        session_type: SessionType,
        assignments: Sequence[Assignment],
        start_time: Optional[datetime],
        end_time: Optional[datetime],
    ) -> int:
        raise NotImplementedError

    def update_fields(self, session_id: int, fields: Mapping[str, Any]) -> None:
        """Targeted update of the given columns only."""

        raise NotImplementedError

    def open_window(self, session_id: int, *, start: datetime, end: datetime) -> bool:
        raise NotImplementedError

    def close_window(self, session_id: int) -> bool:
        raise NotImplementedError

    def close_expired(self, now: datetime, *, day_id: Optional[int] = None) -> int:
        """Predicate update `attendance_open AND end < now`; returns rows transitioned."""

        raise NotImplementedError

    def close_open_for_day(self, day_id: int) -> int:
        raise NotImplementedError

    def latest_update(self) -> Optional[datetime]:
        raise NotImplementedError
