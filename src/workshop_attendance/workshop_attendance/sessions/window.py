"""Window clock: attendance-window state computed from a session snapshot.

Pure functions, no I/O. `now` is always passed in (naive UTC).
"""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta

from ..core.constants import DEFAULT_ATTENDANCE_WINDOW_MINUTES
from ..core.enums import WindowStatus
from .model import Session


def is_active(session: Session, now: datetime) -> bool:
    start = session.attendance_start_time
    end = session.attendance_end_time
    if not session.attendance_open or start is None or end is None:
        return False
    return start <= now <= end


def is_expired(session: Session, now: datetime) -> bool:
    end = session.attendance_end_time
    return bool(session.attendance_open and end is not None and now > end)


def window_status(session: Session, now: datetime) -> WindowStatus:
    # The flag wins: an admin-opened window reads as active even under clock skew.
    if session.attendance_open:
        return WindowStatus.ACTIVE
    start = session.attendance_start_time
    end = session.attendance_end_time
    if start is not None and end is not None and now > end:
        return WindowStatus.CLOSED
    return WindowStatus.NOT_STARTED


def accepts_marks(session: Session, now: datetime) -> bool:
    """Gate check: the flag must be set and the window must not have ended.

    An explicit stop clears the flag and is final. A `now` slightly before the
    recorded start is tolerated.
    """
    return session.attendance_open and not is_expired(session, now)


def start_window(
    session: Session, now: datetime, duration: timedelta = timedelta(minutes=DEFAULT_ATTENDANCE_WINDOW_MINUTES)
) -> Session:
    return replace(session, attendance_open=True, attendance_start_time=now, attendance_end_time=now + duration)


def stop_window(session: Session) -> Session:
    return replace(session, attendance_open=False)


def effective(session: Session, now: datetime) -> Session:
    """Copy of `session` as it must be shown at `now` (expired windows read closed)."""
    if is_expired(session, now):
        return stop_window(session)
    return session
