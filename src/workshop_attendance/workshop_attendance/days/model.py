from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import DayStatus


@dataclass(frozen=True)
class Day:
    """Domain entity: a schedule day gating every session under it."""

    day_id: int
    day_number: int
    title: str
    status: DayStatus
    day_date: Optional[date] = None
    updated_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.status == DayStatus.OPEN

    def to_dict(self) -> dict:
        return {
            "id": self.day_id,
            "dayNumber": self.day_number,
            "title": self.title,
            "status": self.status.value,
            "date": self.day_date.isoformat() if self.day_date else None,
            "updatedAt": to_iso(self.updated_at),
        }
