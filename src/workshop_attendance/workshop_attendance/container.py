from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .cache.response_cache import ResponseCache
from .common.datetime_utils import utc_now
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .days.mysql_day_repository import MySQLDayRepository
from .days.repository import DayRepository
from .days.service import DayService
from .eligibility.factory import GateRuleFactory
from .progress.service import ProgressService
from .sessions.closer import LazyCloser
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.scheduler import SessionSweeper
from .sessions.service import SessionService
from .storage.object_storage import LocalObjectStorage, ObjectStorage
from .submissions.mysql_submission_repository import MySQLSubmissionRepository
from .submissions.repository import SubmissionRepository
from .submissions.service import SubmissionService
from .users.guards import Guards, make_guards
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.security import PasswordHasher, TokenService
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    cache: ResponseCache
    storage: ObjectStorage
    guards: Guards

    users_repo: UserRepository
    days_repo: DayRepository
    sessions_repo: SessionRepository
    attendance_repo: AttendanceRepository
    submissions_repo: SubmissionRepository

    auth_service: AuthService
    user_service: UserService
    day_service: DayService
    session_service: SessionService
    attendance_service: AttendanceService
    submission_service: SubmissionService
    progress_service: ProgressService

    closer: LazyCloser
    sweeper: SessionSweeper


def assemble(
    *,
    users_repo: UserRepository,
    days_repo: DayRepository,
    sessions_repo: SessionRepository,
    attendance_repo: AttendanceRepository,
    submissions_repo: SubmissionRepository,
    storage: ObjectStorage,
    cache: ResponseCache,
    jwt_secret: str,
    jwt_expire_hours: int = constants.DEFAULT_JWT_EXPIRE_HOURS,
    window_minutes: int = constants.DEFAULT_ATTENDANCE_WINDOW_MINUTES,
    max_login_attempts: int = constants.DEFAULT_MAX_LOGIN_ATTEMPTS,
    lock_minutes: int = constants.DEFAULT_LOCK_MINUTES,
    sweep_interval_seconds: int = constants.DEFAULT_SWEEP_INTERVAL_SECONDS,
    conn: Optional[DatabaseConnection] = None,
    clock: Callable[[], datetime] = utc_now,
) -> Container:
    """Wire services over already-built repositories (MySQL in production, fakes in tests)."""

    hasher = PasswordHasher()
    tokens = TokenService(jwt_secret, expire_hours=jwt_expire_hours)
    rules = GateRuleFactory()

    auth_service = AuthService(
        users_repo, hasher, tokens, max_attempts=max_login_attempts, lock_minutes=lock_minutes
    )
    closer = LazyCloser(sessions_repo, cache, clock=clock)

    return Container(
        conn=conn,
        cache=cache,
        storage=storage,
        guards=make_guards(auth_service),
        users_repo=users_repo,
        days_repo=days_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        submissions_repo=submissions_repo,
        auth_service=auth_service,
        user_service=UserService(users_repo, hasher),
        day_service=DayService(days_repo, sessions_repo, cache),
        session_service=SessionService(
            sessions_repo,
            days_repo,
            attendance_repo,
            submissions_repo,
            closer,
            cache,
            window_minutes=window_minutes,
            clock=clock,
        ),
        attendance_service=AttendanceService(
            attendance_repo,
            sessions_repo,
            days_repo,
            users_repo,
            submissions_repo,
            storage,
            cache,
            rules=rules,
            clock=clock,
        ),
        submission_service=SubmissionService(
            submissions_repo, sessions_repo, attendance_repo, storage, cache, rules=rules, clock=clock
        ),
        progress_service=ProgressService(users_repo, sessions_repo, days_repo, attendance_repo, submissions_repo),
        closer=closer,
        sweeper=SessionSweeper(closer, interval_seconds=sweep_interval_seconds),
    )


def build_container(*, settings: Any) -> Container:
    db_config = getattr(settings, "DB_CONFIG")
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        pool_size=int(db_config.get("pool_size", 3)),
        connection_timeout=int(db_config.get("connection_timeout", 5)),
    )
    conn = DatabaseConnection.get_instance(config)

    return assemble(
        users_repo=MySQLUserRepository(conn),
        days_repo=MySQLDayRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        submissions_repo=MySQLSubmissionRepository(conn),
        storage=LocalObjectStorage(
            getattr(settings, "UPLOAD_FOLDER", "uploads"),
            url_prefix=getattr(settings, "UPLOAD_URL_PREFIX", "/uploads"),
        ),
        cache=ResponseCache(getattr(settings, "CACHE_TTLS", None), enabled=bool(getattr(settings, "CACHE_ENABLED", True))),
        jwt_secret=str(getattr(settings, "JWT_SECRET", None) or getattr(settings, "SECRET_KEY")),
        jwt_expire_hours=int(getattr(settings, "JWT_EXPIRE_HOURS", constants.DEFAULT_JWT_EXPIRE_HOURS)),
        window_minutes=int(getattr(settings, "ATTENDANCE_WINDOW_MINUTES", constants.DEFAULT_ATTENDANCE_WINDOW_MINUTES)),
        max_login_attempts=int(getattr(settings, "MAX_LOGIN_ATTEMPTS", constants.DEFAULT_MAX_LOGIN_ATTEMPTS)),
        lock_minutes=int(getattr(settings, "LOCK_MINUTES", constants.DEFAULT_LOCK_MINUTES)),
        sweep_interval_seconds=int(getattr(settings, "SWEEP_INTERVAL_SECONDS", constants.DEFAULT_SWEEP_INTERVAL_SECONDS)),
        conn=conn,
    )
