from datetime import date

import pytest

from src.workshop_attendance.workshop_attendance.cache.response_cache import CacheTag
from src.workshop_attendance.workshop_attendance.core.enums import DayStatus, DenyReason
from src.workshop_attendance.workshop_attendance.core.exceptions import EligibilityDenied, NotFoundError, ValidationError


def test_new_day_is_locked_and_hidden_until_opened(container, student, make_session):
    day = container.day_service.create_day(day_number=1, title="Foundations", day_date="2026-03-02")
    make_session(day)

    assert day.status == DayStatus.LOCKED
    assert day.day_date == date(2026, 3, 2)
    with pytest.raises(EligibilityDenied) as exc:
        container.session_service.sessions_for_day(student, day.day_id)
    assert exc.value.reason == DenyReason.DAY_NOT_OPEN

    container.day_service.update_status(day_id=day.day_id, status="OPEN")

    assert len(container.session_service.sessions_for_day(student, day.day_id)) == 1


def test_duplicate_day_number(container):
    container.day_service.create_day(day_number=1, title="Foundations")

    with pytest.raises(ValidationError) as exc:
        container.day_service.create_day(day_number=1, title="Again")
    assert exc.value.field == "dayNumber"


def test_bad_date(container):
    with pytest.raises(ValidationError) as exc:
        container.day_service.create_day(day_number=1, title="Foundations", day_date="02/03/2026")
    assert exc.value.field == "date"


def test_unknown_status_rejected(container, make_day):
    day = make_day()

    with pytest.raises(ValidationError) as exc:
        container.day_service.update_status(day_id=day.day_id, status="ARCHIVED")
    assert exc.value.field == "status"


def test_unknown_day(container):
    with pytest.raises(NotFoundError):
        container.day_service.update_status(day_id=99, status="OPEN")


@pytest.mark.parametrize("status", ["LOCKED", "CLOSED"])
def test_leaving_open_stops_live_windows(container, repos, clock, make_day, make_session, window, status):
    day = make_day()
    other = make_day(day_number=2)
    live = make_session(day, **window(clock.now))
    untouched = make_session(other, **window(clock.now))

    container.day_service.update_status(day_id=day.day_id, status=status)

    assert repos.sessions.get_by_id(live.session_id).attendance_open is False
    assert repos.sessions.get_by_id(untouched.session_id).attendance_open is True


def test_status_change_clears_every_view(container, cache, make_day):
    day = make_day(status=DayStatus.LOCKED)
    keys = [cache.make_key(tag) for tag in CacheTag]
    for key in keys:
        cache.set(key, ["x"])

    container.day_service.update_status(day_id=day.day_id, status="OPEN")

    assert all(cache.get(k) is None for k in keys)
