from __future__ import annotations

import io
from datetime import timedelta

import pytest

from src.workshop_attendance.workshop_attendance.core.enums import AssignmentType, DayStatus
from src.workshop_attendance.workshop_attendance.sessions.model import Assignment


def _photo(name: str = "selfie.jpg"):
    return (io.BytesIO(b"\xff\xd8jpeg"), name)


@pytest.fixture
def live_session(container, make_day, make_session):
    session = make_session(
        make_day(),
        assignments=(Assignment("Lab 1", AssignmentType.FILE), Assignment("Reflection", AssignmentType.TEXT)),
    )
    container.session_service.start_attendance(session.session_id)
    return session


def test_health(client):
    assert client.get("/api/health").get_json() == {"status": "ok"}


def test_student_routes_need_token(client):
    resp = client.get("/api/student/days")

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_admin_routes_reject_students(client, student, auth_header):
    resp = client.get("/api/admin/days", headers=auth_header(student))

    assert resp.status_code == 403


def test_login_returns_token_usable_on_me(client, student):
    resp = client.post("/api/auth/login", json={"username": "9924005056", "password": "07042007"})
    token = resp.get_json()["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 200
    assert me.get_json()["user"]["registerNumber"] == "9924005056"


def test_login_failure_is_401(client, student):
    resp = client.post("/api/auth/login", json={"username": "9924005056", "password": "nope"})

    assert resp.status_code == 401


def test_admin_day_lifecycle(client, admin, student, auth_header):
    created = client.post("/api/admin/days", json={"dayNumber": 1, "title": "Foundations"}, headers=auth_header(admin))
    day_id = created.get_json()["day"]["id"]

    locked = client.get(f"/api/student/sessions/{day_id}", headers=auth_header(student))
    opened = client.put(f"/api/admin/days/{day_id}/status", json={"status": "OPEN"}, headers=auth_header(admin))
    listed = client.get(f"/api/student/sessions/{day_id}", headers=auth_header(student))

    assert created.status_code == 201
    assert created.get_json()["day"]["status"] == "LOCKED"
    assert locked.status_code == 403
    assert locked.get_json()["reason"] == "DAY_NOT_OPEN"
    assert opened.get_json()["day"]["status"] == "OPEN"
    assert listed.status_code == 200
    assert listed.get_json() == []


def test_validation_error_names_field(client, admin, auth_header):
    resp = client.post("/api/admin/days", json={"dayNumber": "one", "title": "x"}, headers=auth_header(admin))

    assert resp.status_code == 400
    assert resp.get_json()["field"] == "dayNumber"


def test_create_session_and_start_stop_window(client, admin, clock, make_day, auth_header):
    day = make_day()
    created = client.post(
        "/api/admin/sessions",
        json={
            "dayId": day.day_id,
            "title": "Git basics",
            "mode": "OFFLINE",
            "assignments": [{"title": "Lab 1", "type": "file"}],
        },
        headers=auth_header(admin),
    )
    session_id = created.get_json()["session"]["id"]

    started = client.post(f"/api/admin/sessions/{session_id}/attendance/start", headers=auth_header(admin))
    stopped = client.post(f"/api/admin/sessions/{session_id}/attendance/stop", headers=auth_header(admin))

    assert created.status_code == 201
    assert created.get_json()["session"]["assignments"][0]["type"] == "file"
    assert started.get_json()["session"]["attendanceOpen"] is True
    assert started.get_json()["windowEndsAt"] == (clock.now + timedelta(minutes=10)).isoformat() + "Z"
    assert stopped.get_json()["session"]["attendanceOpen"] is False


def test_start_refused_while_day_locked(client, admin, make_day, make_session, auth_header):
    session = make_session(make_day(status=DayStatus.LOCKED))

    resp = client.post(f"/api/admin/sessions/{session.session_id}/attendance/start", headers=auth_header(admin))

    assert resp.status_code == 403
    assert resp.get_json()["reason"] == "DAY_NOT_OPEN"


def test_mark_attendance_status_codes(client, student, live_session, auth_header):
    first = client.post(
        "/api/student/attendance",
        data={"sessionId": str(live_session.session_id), "photo": _photo()},
        content_type="multipart/form-data",
        headers=auth_header(student),
    )
    second = client.post(
        "/api/student/attendance",
        data={"sessionId": str(live_session.session_id), "photo": _photo()},
        content_type="multipart/form-data",
        headers=auth_header(student),
    )

    assert first.status_code == 201
    assert first.get_json()["attendance"]["status"] == "PRESENT"
    assert second.status_code == 409
    assert second.get_json()["reason"] == "ALREADY_MARKED"


def test_mark_without_photo_is_400(client, student, live_session, auth_header):
    resp = client.post(
        "/api/student/attendance",
        data={"sessionId": str(live_session.session_id)},
        content_type="multipart/form-data",
        headers=auth_header(student),
    )

    assert resp.status_code == 400
    assert resp.get_json()["reason"] == "PHOTO_REQUIRED"


def test_upload_failure_is_502(client, repos, student, live_session, auth_header):
    repos.storage.fail = True

    resp = client.post(
        "/api/student/attendance",
        data={"sessionId": str(live_session.session_id), "photo": _photo()},
        content_type="multipart/form-data",
        headers=auth_header(student),
    )

    assert resp.status_code == 502


def test_submit_assignment_without_attendance_is_403(client, student, live_session, auth_header):
    resp = client.post(
        "/api/student/assignment",
        data={
            "sessionId": str(live_session.session_id),
            "assignmentTitle": "Lab 1",
            "assignmentType": "file",
            "assignment": [(io.BytesIO(b"%PDF"), "lab.pdf")],
        },
        content_type="multipart/form-data",
        headers=auth_header(student),
    )

    assert resp.status_code == 403
    assert resp.get_json()["reason"] == "ATTENDANCE_REQUIRED"


def test_submit_text_assignment_as_json(client, repos, clock, student, live_session, auth_header):
    repos.attendance.insert(
        register_number=student.register_number,
        session_id=live_session.session_id,
        photo_url="/p.jpg",
        marked_at=clock.now,
    )

    resp = client.post(
        "/api/student/assignment",
        json={
            "sessionId": live_session.session_id,
            "assignmentTitle": "Reflection",
            "assignmentType": "text",
            "response": "done",
        },
        headers=auth_header(student),
    )

    assert resp.status_code == 201
    assert resp.get_json()["submission"]["assignmentTitle"] == "Reflection"


def test_submit_unknown_title_is_404(client, repos, clock, student, live_session, auth_header):
    repos.attendance.insert(
        register_number=student.register_number,
        session_id=live_session.session_id,
        photo_url="/p.jpg",
        marked_at=clock.now,
    )

    resp = client.post(
        "/api/student/assignment",
        json={"sessionId": live_session.session_id, "assignmentTitle": "Bogus 1", "response": "x"},
        headers=auth_header(student),
    )

    assert resp.status_code == 404
    assert resp.get_json()["reason"] == "ASSIGNMENT_NOT_FOUND"
    assert repos.submissions.rows == []


def test_submit_with_wrong_type_is_400(client, repos, student, live_session, auth_header):
    resp = client.post(
        "/api/student/assignment",
        json={
            "sessionId": live_session.session_id,
            "assignmentTitle": "Lab 1",
            "assignmentType": "certificate",
            "response": "x",
        },
        headers=auth_header(student),
    )

    assert resp.status_code == 400
    assert repos.submissions.rows == []


def test_override_then_progress(client, admin, student, live_session, auth_header):
    override = client.post(
        "/api/admin/attendance/override",
        json={"registerNumber": student.register_number, "sessionId": live_session.session_id, "comment": "late arrival approved"},
        headers=auth_header(admin),
    )
    progress = client.get("/api/admin/progress", headers=auth_header(admin))

    assert override.status_code == 201
    cell = progress.get_json()["students"][0]["sessions"][0]
    assert cell["attendance"]["isOverride"] is True


def test_progress_rejects_oversized_page(client, admin, auth_header):
    resp = client.get("/api/admin/progress?limit=1000", headers=auth_header(admin))

    assert resp.status_code == 400


def test_student_sessions_cached_per_student_and_bypassable(
    client, repos, clock, student, live_session, auth_header
):
    url = f"/api/student/sessions/{live_session.day_id}"
    before = client.get(url, headers=auth_header(student)).get_json()
    repos.attendance.insert(
        register_number=student.register_number,
        session_id=live_session.session_id,
        photo_url="/p.jpg",
        marked_at=clock.now,
    )

    cached = client.get(url, headers=auth_header(student)).get_json()
    fresh = client.get(url + "?fresh=1", headers=auth_header(student)).get_json()

    assert before[0]["hasAttendance"] is False
    assert cached[0]["hasAttendance"] is False
    assert fresh[0]["hasAttendance"] is True


def test_student_session_lists_only_defined_titles(client, repos, clock, student, live_session, auth_header):
    for title in ("Reflection", "Bogus 1"):
        repos.submissions.insert(
            register_number=student.register_number,
            session_id=live_session.session_id,
            assignment_title=title,
            assignment_type=AssignmentType.TEXT,
            response="r",
            files=(),
            submitted_at=clock.now,
        )

    resp = client.get(f"/api/student/sessions/{live_session.day_id}?fresh=1", headers=auth_header(student))

    assert resp.get_json()[0]["assignmentsSubmitted"] == ["Reflection"]
    assert resp.get_json()[0]["totalAssignments"] == 2


def test_admin_sessions_reflect_stop_immediately(client, admin, live_session, auth_header):
    first = client.get("/api/admin/sessions", headers=auth_header(admin)).get_json()
    client.post(f"/api/admin/sessions/{live_session.session_id}/attendance/stop", headers=auth_header(admin))
    second = client.get("/api/admin/sessions", headers=auth_header(admin)).get_json()

    assert first[0]["isAttendanceActive"] is True
    assert second[0]["isAttendanceActive"] is False


def test_student_read_after_expiry_closes_window(client, repos, clock, student, live_session, auth_header):
    clock.advance(minutes=11)

    resp = client.get(f"/api/student/session/{live_session.session_id}", headers=auth_header(student))

    assert resp.get_json()["attendanceStatus"] == "closed"
    assert repos.sessions.get_by_id(live_session.session_id).attendance_open is False


def test_cron_requires_secret(client, clock, live_session):
    clock.advance(minutes=11)

    denied = client.post("/api/cron/close-expired")
    wrong = client.post("/api/cron/close-expired", headers={"X-Cron-Secret": "guess"})
    allowed = client.post("/api/cron/close-expired", headers={"Authorization": "Bearer test-cron-secret"})

    assert denied.status_code == 401
    assert wrong.status_code == 401
    assert allowed.get_json() == {"success": True, "closed": 1}


def test_sync_check_reports_latest_update(client, student, auth_header):
    resp = client.get("/api/sync/check", headers=auth_header(student))

    assert resp.status_code == 200
    assert resp.get_json() == {"lastUpdate": 0}


def test_admin_cache_clear(client, admin, auth_header):
    client.get("/api/admin/days", headers=auth_header(admin))

    resp = client.post("/api/admin/cache/clear", headers=auth_header(admin))

    assert resp.get_json() == {"success": True, "cleared": 1}


def test_preload_students(client, admin, auth_header):
    resp = client.post(
        "/api/admin/students/preload",
        json={"students": [{"registerNumber": "a1", "name": "Asha", "dateOfBirth": "01012006", "yearOfStudy": "3"}]},
        headers=auth_header(admin),
    )

    assert resp.status_code == 201
    assert resp.get_json()["created"] == ["A1"]
