from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import DayStatus
from .model import Day


class DayRepository(Protocol):
    def get_by_id(self, day_id: int) -> Optional[Day]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Day]:
        """Days ordered by day number."""

        raise NotImplementedError

    def create(self, *, day_number: int, title: str, day_date: Optional[date]) -> int:
        """New days start LOCKED. Raises DuplicateRecordError on a taken day number."""

        raise NotImplementedError

    def update_status(self, day_id: int, status: DayStatus) -> bool:
        raise NotImplementedError

    def latest_update(self) -> Optional[datetime]:
        raise NotImplementedError
