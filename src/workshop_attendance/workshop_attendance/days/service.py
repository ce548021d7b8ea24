from __future__ import annotations

import logging
from typing import Any, Optional

from ..cache.response_cache import MutationKind, ResponseCache
from ..common.datetime_utils import parse_iso_date, utc_now
from ..common.validators import parse_positive_int, require_enum, require_non_empty
from ..core.enums import DayStatus
from ..core.exceptions import DuplicateRecordError, NotFoundError, ValidationError
from ..sessions.repository import SessionRepository
from .model import Day
from .repository import DayRepository

logger = logging.getLogger(__name__)


class DayService:
    """Use case: admin control of days, the outer gate on every session."""

    def __init__(self, days: DayRepository, sessions: SessionRepository, cache: ResponseCache):
        self._days = days
        self._sessions = sessions
        self._cache = cache

    def get(self, day_id: int) -> Day:
        day = self._days.get_by_id(int(day_id))
        if not day:
            raise NotFoundError("Day not found")
        return day

    def list_days(self) -> list[Day]:
        return list(self._days.list_all())

    def create_day(self, *, day_number: Any, title: Any, day_date: Optional[str] = None) -> Day:
        number = parse_positive_int(day_number, "dayNumber")
        title = require_non_empty(title, "title")
        if day_date:
            try:
                parsed = parse_iso_date(str(day_date)[:10])
            except ValueError:
                raise ValidationError("date must be YYYY-MM-DD", field="date")
        else:
            parsed = utc_now().date()

        try:
            day_id = self._days.create(day_number=number, title=title, day_date=parsed)
        except DuplicateRecordError:
            raise ValidationError(f"Day {number} already exists", field="dayNumber")

        self._cache.invalidate(MutationKind.DAY_CHANGED)
        logger.info("Day %s created (id=%s)", number, day_id)
        return self.get(day_id)

    def update_status(self, *, day_id: int, status: Any) -> Day:
        new_status = require_enum(status, DayStatus, "status")
        day = self.get(day_id)

        self._days.update_status(day.day_id, new_status)
        if new_status != DayStatus.OPEN:
            # A day that is not open can never keep a live attendance window.
            stopped = self._sessions.close_open_for_day(day.day_id)
            if stopped:
                logger.info("Stopped %s open attendance window(s) under day %s", stopped, day.day_number)

        self._cache.invalidate(MutationKind.DAY_CHANGED)
        logger.info("Day %s status %s -> %s", day.day_number, day.status.value, new_status.value)
        return self.get(day.day_id)
