from __future__ import annotations

import atexit
import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler

from ..core.constants import DEFAULT_SWEEP_INTERVAL_SECONDS
from .closer import LazyCloser

logger = logging.getLogger(__name__)

JOB_ID = "close_expired_attendance_windows"


class SessionSweeper:
    """Process-local periodic sweep. Safe to run in every worker process."""

    def __init__(self, closer: LazyCloser, *, interval_seconds: int = DEFAULT_SWEEP_INTERVAL_SECONDS):
        self._closer = closer
        self._interval = int(interval_seconds)
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        if self.running:
            return
        scheduler = BackgroundScheduler(daemon=True)
        scheduler.add_job(
            func=self._closer.sweep,
            trigger="interval",
            seconds=self._interval,
            id=JOB_ID,
            name="Auto-close expired attendance windows",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        atexit.register(self.shutdown)
        logger.info("Attendance window sweeper started (every %ss)", self._interval)

    def shutdown(self) -> None:
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
