import pytest

from src.workshop_attendance.workshop_attendance.core.enums import AssignmentType, Role
from src.workshop_attendance.workshop_attendance.core.exceptions import ValidationError
from src.workshop_attendance.workshop_attendance.progress.service import ProgressQuery
from src.workshop_attendance.workshop_attendance.sessions.model import Assignment


def _add_students(repos, count: int):
    for i in range(count):
        repos.users.add(
            register_number=f"99240050{i:02d}",
            name=f"Student {i:02d}",
            password_hash="x",
            role=Role.STUDENT,
            year_of_study="2",
        )


def test_distinct_titles_counted_once(container, repos, clock, student, make_day, make_session):
    session = make_session(
        make_day(),
        assignments=(Assignment("Lab 1", AssignmentType.FILE), Assignment("Quiz", AssignmentType.TEXT)),
    )
    for title in ("Lab 1", "Lab 1", "Quiz"):
        repos.submissions.insert(
            register_number=student.register_number,
            session_id=session.session_id,
            assignment_title=title,
            assignment_type=AssignmentType.TEXT,
            response="r",
            files=(),
            submitted_at=clock.now,
        )

    report = container.progress_service.progress(ProgressQuery())
    cell = report["students"][0]["sessions"][0]

    assert cell["assignmentsCompleted"] == 2
    assert cell["totalAssignments"] == 2
    assert cell["attendance"] is None
    assert cell["dayNumber"] == 1


def test_paginates_students_not_sessions(container, repos, make_day, make_session):
    _add_students(repos, 5)
    day = make_day()
    make_session(day)
    make_session(day)

    report = container.progress_service.progress(ProgressQuery(page=2, limit=2))

    assert [s["registerNumber"] for s in report["students"]] == ["9924005002", "9924005003"]
    assert all(len(s["sessions"]) == 2 for s in report["students"])
    assert report["pagination"] == {"total": 5, "pages": 3, "currentPage": 2, "limit": 2}


def test_empty_roster_has_zero_pages(container):
    report = container.progress_service.progress(ProgressQuery())

    assert report["students"] == []
    assert report["pagination"]["pages"] == 0


def test_search_filters_by_name(container, repos):
    _add_students(repos, 3)

    report = container.progress_service.progress(ProgressQuery(search="student 01"))

    assert [s["name"] for s in report["students"]] == ["Student 01"]


def test_query_parse_defaults_and_bounds():
    assert ProgressQuery.parse({}) == ProgressQuery(page=1, limit=50, search=None)
    assert ProgressQuery.parse({"page": "3", "limit": "20", "search": " ab "}) == ProgressQuery(3, 20, "ab")

    with pytest.raises(ValidationError):
        ProgressQuery.parse({"limit": "500"})
    with pytest.raises(ValidationError):
        ProgressQuery.parse({"page": "0"})


def test_titles_not_defined_on_session_are_not_counted(container, repos, clock, student, make_day, make_session):
    session = make_session(make_day(), assignments=(Assignment("Quiz", AssignmentType.TEXT),))
    for title in ("Quiz", "Bogus 1", "Bogus 2"):
        repos.submissions.insert(
            register_number=student.register_number,
            session_id=session.session_id,
            assignment_title=title,
            assignment_type=AssignmentType.TEXT,
            response="r",
            files=(),
            submitted_at=clock.now,
        )

    cell = container.progress_service.progress(ProgressQuery())["students"][0]["sessions"][0]

    assert cell["assignmentsCompleted"] == 1
    assert cell["totalAssignments"] == 1
