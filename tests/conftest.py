from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timedelta
from types import SimpleNamespace
from typing import Optional

import pytest

from src.workshop_attendance.workshop_attendance.attendance.model import AttendanceRecord
from src.workshop_attendance.workshop_attendance.cache.response_cache import ResponseCache
from src.workshop_attendance.workshop_attendance.container import assemble
from src.workshop_attendance.workshop_attendance.core.enums import AttendanceStatus, DayStatus, Role
from src.workshop_attendance.workshop_attendance.core.exceptions import DuplicateRecordError, UploadError
from src.workshop_attendance.workshop_attendance.days.model import Day
from src.workshop_attendance.workshop_attendance.sessions.model import Session
from src.workshop_attendance.workshop_attendance.submissions.model import Submission
from src.workshop_attendance.workshop_attendance.users.model import User
from src.workshop_attendance.workshop_attendance.users.security import PasswordHasher, TokenService

T0 = datetime(2026, 3, 2, 9, 0, 0)


class FakeClock:
    """Wall clock (naive UTC) for services."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeMonotonic:
    """Monotonic seconds for the response cache."""

    def __init__(self, start: float = 1000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class FakeUsersRepo:
    def __init__(self):
        self._next_id = 1
        self.users: dict[int, User] = {}

    def add(self, **kwargs) -> User:
        user = User(user_id=self._next_id, **kwargs)
        self.users[user.user_id] = user
        self._next_id += 1
        return user

    def get_by_id(self, user_id):
        return self.users.get(int(user_id))

    def get_by_register_number(self, register_number):
        return next((u for u in self.users.values() if u.register_number == register_number), None)

    def get_by_login(self, register_number, email):
        return next((u for u in self.users.values() if u.register_number == register_number or u.email == email), None)

    def create_user(self, *, register_number, name, password_hash, role, email=None, department="", year_of_study=None):
        if self.get_by_register_number(register_number) or (email and self.get_by_login("", email)):
            raise DuplicateRecordError("duplicate")
        return self.add(
            register_number=register_number,
            name=name,
            password_hash=password_hash,
            role=role,
            email=email,
            department=department,
            year_of_study=year_of_study,
        ).user_id

    def record_failed_login(self, user_id, *, max_attempts, lock_until):
        user = self.users[user_id]
        attempts = user.login_attempts + 1
        self.users[user_id] = replace(
            user, login_attempts=attempts, lock_until=lock_until if attempts >= max_attempts else user.lock_until
        )
        return attempts

    def record_successful_login(self, user_id, *, now):
        self.users[user_id] = replace(self.users[user_id], login_attempts=0, lock_until=None, last_active=now)

    def update_password_hash(self, user_id, password_hash):
        self.users[user_id] = replace(self.users[user_id], password_hash=password_hash)
        return True

    def list_students_page(self, *, offset, limit, search=None):
        students = sorted(
            (u for u in self.users.values() if u.role == Role.STUDENT), key=lambda u: u.register_number
        )
        if search:
            needle = search.lower()
            students = [u for u in students if needle in u.name.lower() or needle in u.register_number.lower()]
        return students[offset : offset + limit], len(students)


class FakeDaysRepo:
    def __init__(self):
        self._next_id = 1
        self.days: dict[int, Day] = {}

    def get_by_id(self, day_id):
        return self.days.get(int(day_id))

    def list_all(self):
        return sorted(self.days.values(), key=lambda d: d.day_number)

    def create(self, *, day_number, title, day_date):
        if any(d.day_number == day_number for d in self.days.values()):
            raise DuplicateRecordError("duplicate")
        day = Day(day_id=self._next_id, day_number=day_number, title=title, status=DayStatus.LOCKED, day_date=day_date)
        self.days[day.day_id] = day
        self._next_id += 1
        return day.day_id

    def update_status(self, day_id, status):
        day = self.days[int(day_id)]
        self.days[day.day_id] = replace(day, status=status)
        return day.status != status

    def latest_update(self):
        stamps = [d.updated_at for d in self.days.values() if d.updated_at]
        return max(stamps) if stamps else None


class FakeSessionsRepo:
    def __init__(self):
        self._next_id = 1
        self.sessions: dict[int, Session] = {}
        self.close_expired_calls = 0

    def add(self, session: Session) -> Session:
        self.sessions[session.session_id] = session
        self._next_id = max(self._next_id, session.session_id + 1)
        return session

    def get_by_id(self, session_id):
        return self.sessions.get(int(session_id))

    def list_for_day(self, day_id):
        return [s for s in self.list_all() if s.day_id == int(day_id)]

    def list_all(self):
        return sorted(self.sessions.values(), key=lambda s: s.session_id)

    def create(self, *, day_id, title, description, mode, session_type, assignments, start_time, end_time):
        session = Session(
            session_id=self._next_id,
            day_id=day_id,
            title=title,
            description=description,
            mode=mode,
            session_type=session_type,
            assignments=tuple(assignments),
            start_time=start_time,
            end_time=end_time,
        )
        return self.add(session).session_id

    def update_fields(self, session_id, fields):
        session = self.sessions[int(session_id)]
        self.sessions[session.session_id] = replace(session, **fields)

    def open_window(self, session_id, *, start, end):
        session = self.sessions[int(session_id)]
        self.sessions[session.session_id] = replace(
            session, attendance_open=True, attendance_start_time=start, attendance_end_time=end
        )
        return True

    def close_window(self, session_id):
        session = self.sessions[int(session_id)]
        self.sessions[session.session_id] = replace(session, attendance_open=False)
        return session.attendance_open

    def close_expired(self, now, *, day_id=None):
        self.close_expired_calls += 1
        closed = 0
        for s in list(self.sessions.values()):
            if day_id is not None and s.day_id != int(day_id):
                continue
            if s.attendance_open and s.attendance_end_time is not None and s.attendance_end_time < now:
                self.sessions[s.session_id] = replace(s, attendance_open=False)
                closed += 1
        return closed

    def close_open_for_day(self, day_id):
        closed = 0
        for s in list(self.sessions.values()):
            if s.day_id == int(day_id) and s.attendance_open:
                self.sessions[s.session_id] = replace(s, attendance_open=False)
                closed += 1
        return closed

    def latest_update(self):
        stamps = [s.updated_at for s in self.sessions.values() if s.updated_at]
        return max(stamps) if stamps else None


class FakeAttendanceRepo:
    """Enforces the (register_number, session_id) unique key like the real table."""

    def __init__(self):
        self._lock = threading.Lock()
        self._next_id = 1
        self.rows: dict[tuple[str, int], AttendanceRecord] = {}

    def get(self, register_number, session_id):
        return self.rows.get((register_number, int(session_id)))

    def has_present(self, register_number, session_id):
        row = self.get(register_number, session_id)
        return row is not None and row.status == AttendanceStatus.PRESENT

    def insert(self, *, register_number, session_id, photo_url, marked_at):
        with self._lock:
            key = (register_number, int(session_id))
            if key in self.rows:
                raise DuplicateRecordError("duplicate")
            record = AttendanceRecord(
                attendance_id=self._next_id,
                register_number=register_number,
                session_id=int(session_id),
                marked_at=marked_at,
                photo_url=photo_url,
            )
            self.rows[key] = record
            self._next_id += 1
            return record.attendance_id

    def upsert_override(self, *, register_number, session_id, comment, override_by, now):
        with self._lock:
            key = (register_number, int(session_id))
            existing = self.rows.get(key)
            if existing:
                record = replace(
                    existing,
                    status=AttendanceStatus.PRESENT,
                    is_override=True,
                    override_comment=comment,
                    override_by=override_by,
                )
            else:
                record = AttendanceRecord(
                    attendance_id=self._next_id,
                    register_number=register_number,
                    session_id=int(session_id),
                    marked_at=now,
                    is_override=True,
                    override_comment=comment,
                    override_by=override_by,
                )
                self._next_id += 1
            self.rows[key] = record
            return record

    def list_for_student(self, register_number):
        return [r for r in self.rows.values() if r.register_number == register_number]

    def list_for_students(self, register_numbers):
        wanted = set(register_numbers)
        return [r for r in self.rows.values() if r.register_number in wanted]


class FakeSubmissionsRepo:
    def __init__(self):
        self.rows: list[Submission] = []

    def insert(self, *, register_number, session_id, assignment_title, assignment_type, response, files, submitted_at):
        submission = Submission(
            submission_id=len(self.rows) + 1,
            register_number=register_number,
            session_id=int(session_id),
            assignment_title=assignment_title,
            assignment_type=assignment_type,
            response=response,
            files=tuple(files),
            submitted_at=submitted_at,
        )
        self.rows.append(submission)
        return submission.submission_id

    def list_for_student(self, register_number, *, session_id=None):
        return [
            s
            for s in self.rows
            if s.register_number == register_number and (session_id is None or s.session_id == int(session_id))
        ]

    def list_for_students(self, register_numbers):
        wanted = set(register_numbers)
        return [s for s in self.rows if s.register_number in wanted]


class FakeStorage:
    def __init__(self):
        self.uploads: list[tuple[str, int]] = []
        self.fail = False
        self.before_upload = None

    def upload(self, data, mime_type, folder, *, filename=None):
        if self.before_upload is not None:
            self.before_upload()
        if self.fail:
            raise UploadError("File upload failed, please try again")
        self.uploads.append((folder, len(data)))
        return f"/uploads/{folder}/{len(self.uploads)}.bin"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ticker() -> FakeMonotonic:
    return FakeMonotonic()


@pytest.fixture
def cache(ticker) -> ResponseCache:
    return ResponseCache(clock=ticker)


@pytest.fixture
def repos():
    return SimpleNamespace(
        users=FakeUsersRepo(),
        days=FakeDaysRepo(),
        sessions=FakeSessionsRepo(),
        attendance=FakeAttendanceRepo(),
        submissions=FakeSubmissionsRepo(),
        storage=FakeStorage(),
    )


@pytest.fixture
def container(repos, cache, clock):
    return assemble(
        users_repo=repos.users,
        days_repo=repos.days,
        sessions_repo=repos.sessions,
        attendance_repo=repos.attendance,
        submissions_repo=repos.submissions,
        storage=repos.storage,
        cache=cache,
        jwt_secret="test-jwt-secret",
        window_minutes=10,
        max_login_attempts=3,
        lock_minutes=15,
        clock=clock,
    )


_HASHER = PasswordHasher()


@pytest.fixture
def admin(repos) -> User:
    return repos.users.add(
        register_number="ADMIN001",
        name="Admin",
        password_hash=_HASHER.hash("admin-pass"),
        role=Role.ADMIN,
        email="admin@workshop.local",
    )


@pytest.fixture
def student(repos) -> User:
    return repos.users.add(
        register_number="9924005056",
        name="Gurru Ganesh S K",
        password_hash=_HASHER.hash("07042007"),
        role=Role.STUDENT,
        email="gurru@example.com",
        department="CSE",
        year_of_study="1",
    )


@pytest.fixture
def make_day(repos):
    def _make(*, day_number: int = 1, status: DayStatus = DayStatus.OPEN) -> Day:
        day_id = repos.days.create(day_number=day_number, title=f"Day {day_number}", day_date=T0.date())
        if status != DayStatus.LOCKED:
            repos.days.update_status(day_id, status)
        return repos.days.get_by_id(day_id)

    return _make


@pytest.fixture
def make_session(repos):
    def _make(day: Day, *, session_id: Optional[int] = None, **fields) -> Session:
        sid = session_id or (max(repos.sessions.sessions, default=0) + 1)
        fields.setdefault("title", f"Session {sid}")
        return repos.sessions.add(Session(session_id=sid, day_id=day.day_id, **fields))

    return _make


def open_window(start: datetime, minutes: int = 10) -> dict:
    """Session fields for a window opened at `start`."""
    return {
        "attendance_open": True,
        "attendance_start_time": start,
        "attendance_end_time": start + timedelta(minutes=minutes),
    }


@pytest.fixture
def window():
    return open_window


@pytest.fixture
def app(container):
    from src.workshop_attendance.workshop_attendance.main import create_app

    return create_app("config.testing", container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_header():
    tokens = TokenService("test-jwt-secret")

    def _header(user: User) -> dict:
        return {"Authorization": f"Bearer {tokens.issue(user.user_id)}"}

    return _header
