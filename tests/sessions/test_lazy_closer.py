from datetime import timedelta

import pytest

from src.workshop_attendance.workshop_attendance.cache.response_cache import CacheTag
from src.workshop_attendance.workshop_attendance.sessions.closer import LazyCloser


@pytest.fixture
def closer(repos, cache, clock):
    return LazyCloser(repos.sessions, cache, clock=clock)


def test_close_expired_flips_only_expired_windows(repos, closer, clock, make_day, make_session, window):
    day = make_day()
    expired = make_session(day, **window(clock.now - timedelta(minutes=20)))
    live = make_session(day, **window(clock.now - timedelta(minutes=5)))

    assert closer.close_expired() == 1
    assert repos.sessions.get_by_id(expired.session_id).attendance_open is False
    assert repos.sessions.get_by_id(live.session_id).attendance_open is True


def test_close_expired_is_idempotent(closer, clock, make_day, make_session, window):
    make_session(make_day(), **window(clock.now - timedelta(minutes=20)))

    assert closer.close_expired() == 1
    assert closer.close_expired() == 0


def test_invalidates_only_when_something_closed(closer, cache, clock, make_day, make_session, window):
    key = cache.make_key(CacheTag.ADMIN_SESSIONS)
    cache.set(key, {"cached": True})
    make_session(make_day(), **window(clock.now - timedelta(minutes=5)))

    assert closer.close_expired() == 0
    assert cache.get(key) == {"cached": True}

    clock.advance(minutes=6)
    assert closer.close_expired() == 1
    assert cache.get(key) is None


def test_day_scoped_close_leaves_other_days(repos, closer, clock, make_day, make_session, window):
    day1 = make_day(day_number=1)
    day2 = make_day(day_number=2)
    s1 = make_session(day1, **window(clock.now - timedelta(minutes=20)))
    s2 = make_session(day2, **window(clock.now - timedelta(minutes=20)))

    assert closer.close_expired(day_id=day1.day_id) == 1
    assert repos.sessions.get_by_id(s1.session_id).attendance_open is False
    assert repos.sessions.get_by_id(s2.session_id).attendance_open is True


def test_ensure_fresh_returns_closed_view(closer, clock, make_day, make_session, window):
    day = make_day()
    make_session(day, **window(clock.now - timedelta(minutes=20)))
    make_session(day, **window(clock.now - timedelta(minutes=2)))

    shown = closer.ensure_fresh(day.day_id)

    assert [s.attendance_open for s in shown] == [False, True]


def test_sweep_logs_and_swallows_store_errors(cache, clock, caplog):
    class BrokenSessions:
        def close_expired(self, now, *, day_id=None):
            raise RuntimeError("database unavailable")

    closer = LazyCloser(BrokenSessions(), cache, clock=clock)

    assert closer.sweep() == 0
    assert "sweep failed" in caplog.text


def test_manual_stop_is_not_reopened_or_counted(repos, closer, clock, make_day, make_session, window):
    session = make_session(make_day(), **window(clock.now - timedelta(minutes=20)))
    repos.sessions.close_window(session.session_id)

    assert closer.close_expired() == 0
    assert repos.sessions.get_by_id(session.session_id).attendance_open is False
