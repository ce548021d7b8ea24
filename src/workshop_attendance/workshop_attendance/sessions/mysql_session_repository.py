from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..core.enums import SessionMode, SessionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Assignment, Session
from .repository import SessionRepository

_COLUMNS = """
    session_id, day_id, title, description, mode, session_type, attendance_open,
    attendance_start_time, attendance_end_time, start_time, end_time, assignments,
    certificate_upload_open, created_at, updated_at
"""

# Column whitelist for update_fields (API field -> column).
_UPDATABLE = {
    "title": "title",
    "description": "description",
    "mode": "mode",
    "session_type": "session_type",
    "start_time": "start_time",
    "end_time": "end_time",
    "assignments": "assignments",
    "certificate_upload_open": "certificate_upload_open",
}


def _to_session(row: dict) -> Session:
    return Session(
        session_id=int(row["session_id"]),
        day_id=int(row["day_id"]),
        title=row["title"],
        description=row.get("description") or "",
        mode=SessionMode(row["mode"]),
        session_type=SessionType(row["session_type"]),
        attendance_open=bool(row.get("attendance_open")),
        attendance_start_time=row.get("attendance_start_time"),
        attendance_end_time=row.get("attendance_end_time"),
        start_time=row.get("start_time"),
        end_time=row.get("end_time"),
        assignments=tuple(Assignment.from_dict(a) for a in load_json(row.get("assignments"), [])),
        certificate_upload_open=bool(row.get("certificate_upload_open")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: int) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sessions WHERE session_id=%s", (int(session_id),))
            row = fetchone(cur)
            return _to_session(row) if row else None

    def list_for_day(self, day_id: int) -> Sequence[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM sessions WHERE day_id=%s ORDER BY created_at, session_id",
                (int(day_id),),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sessions ORDER BY created_at, session_id")
            return [_to_session(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        day_id: int,
        title: str,
        description: str,
        mode: SessionMode,
        session_type: SessionType,
        assignments: Sequence[Assignment],
        start_time: Optional[datetime],
        end_time: Optional[datetime],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sessions(day_id, title, description, mode, session_type, assignments, start_time, end_time)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(day_id),
                    title,
                    description,
                    mode.value,
                    session_type.value,
                    dump_json([a.to_dict() for a in assignments]),
                    start_time,
                    end_time,
                ),
            )
            return int(cur.lastrowid)

    def update_fields(self, session_id: int, fields: Mapping[str, Any]) -> None:
        sets = []
        params: list[Any] = []
        for key, value in fields.items():
            column = _UPDATABLE.get(key)
            if column is None:
                raise KeyError(f"Session field {key!r} is not updatable")
            if key == "assignments":
                value = dump_json([a.to_dict() for a in value])
            elif isinstance(value, (SessionMode, SessionType)):
                value = value.value
            sets.append(f"{column}=%s")
            params.append(value)
        if not sets:
            return

        params.append(int(session_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE sessions SET {', '.join(sets)} WHERE session_id=%s", tuple(params))

    def open_window(self, session_id: int, *, start: datetime, end: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sessions
                SET attendance_open=1, attendance_start_time=%s, attendance_end_time=%s
                WHERE session_id=%s
                """,
                (start, end, int(session_id)),
            )
            return cur.rowcount > 0

    def close_window(self, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE sessions SET attendance_open=0 WHERE session_id=%s AND attendance_open=1",
                (int(session_id),),
            )
            return cur.rowcount > 0

    def close_expired(self, now: datetime, *, day_id: Optional[int] = None) -> int:
        sql = "UPDATE sessions SET attendance_open=0 WHERE attendance_open=1 AND attendance_end_time < %s"
        params: list[Any] = [now]
        if day_id is not None:
            sql += " AND day_id=%s"
            params.append(int(day_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return int(cur.rowcount or 0)

    def close_open_for_day(self, day_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE sessions SET attendance_open=0 WHERE day_id=%s AND attendance_open=1", (int(day_id),))
            return int(cur.rowcount or 0)

    def latest_update(self) -> Optional[datetime]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT MAX(updated_at) AS latest FROM sessions")
            row = fetchone(cur)
            return row.get("latest") if row else None
