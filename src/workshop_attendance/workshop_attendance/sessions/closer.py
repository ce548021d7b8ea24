from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from ..cache.response_cache import MutationKind, ResponseCache
from ..common.datetime_utils import utc_now
from .model import Session
from .repository import SessionRepository
from .window import effective

logger = logging.getLogger(__name__)


class LazyCloser:
    """Flip expired-but-still-flagged windows to closed.

    The update is conditioned on the expiry predicate, so concurrent or
    repeated runs (several processes, several requests) are harmless: only
    rows still matching transition, and a second run changes nothing.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        cache: ResponseCache,
        *,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._sessions = sessions
        self._cache = cache
        self._clock = clock

    def close_expired(self, now: Optional[datetime] = None, *, day_id: Optional[int] = None) -> int:
        now = now or self._clock()
        closed = self._sessions.close_expired(now, day_id=day_id)
        if closed:
            self._cache.invalidate(MutationKind.SESSIONS_AUTO_CLOSED)
            logger.info(
                "Auto-closed %s expired attendance window(s)%s",
                closed,
                f" for day {day_id}" if day_id is not None else "",
            )
        return closed

    def ensure_fresh(self, day_id: int, now: Optional[datetime] = None) -> list[Session]:
        """Sessions of a day as they must be shown at `now`.

        Runs the day-scoped close first, then re-applies the window clock to
        what was read so a window expiring between the two steps still reads
        closed.
        """
        now = now or self._clock()
        self.close_expired(now, day_id=day_id)
        return [effective(s, now) for s in self._sessions.list_for_day(day_id)]

    def sweep(self, now: Optional[datetime] = None) -> int:
        """All-sessions run for the periodic job and the scheduled trigger. Never raises."""
        try:
            return self.close_expired(now)
        except Exception:
            logger.exception("Attendance window sweep failed")
            return 0
