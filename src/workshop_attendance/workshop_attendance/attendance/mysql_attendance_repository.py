from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateRecordError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, placeholders
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, register_number, session_id, status, photo_url, marked_at,
    is_override, override_comment, override_by
"""


def _to_record(row: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(row["attendance_id"]),
        register_number=row["register_number"],
        session_id=int(row["session_id"]),
        status=AttendanceStatus(row["status"]),
        photo_url=row.get("photo_url"),
        marked_at=row["marked_at"],
        is_override=bool(row.get("is_override")),
        override_comment=row.get("override_comment"),
        override_by=row.get("override_by"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, register_number: str, session_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE register_number=%s AND session_id=%s",
                (register_number, int(session_id)),
            )
            row = fetchone(cur)
            return _to_record(row) if row else None

    def has_present(self, register_number: str, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS ok FROM attendance WHERE register_number=%s AND session_id=%s AND status='PRESENT'",
                (register_number, int(session_id)),
            )
            return fetchone(cur) is not None

    def insert(self, *, register_number: str, session_id: int, photo_url: str, marked_at: datetime) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance(register_number, session_id, status, photo_url, marked_at)
                    VALUES(%s,%s,'PRESENT',%s,%s)
                    """,
                    (register_number, int(session_id), photo_url, marked_at),
                )
                return int(cur.lastrowid)
        except mysql.connector.errors.IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateRecordError("Attendance already recorded") from e
            raise

    def upsert_override(
        self,
        *,
        register_number: str,
        session_id: int,
        comment: str,
        override_by: str,
        now: datetime,
    ) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            # An existing row keeps its photo and original mark time.
            cur.execute(
                """
                INSERT INTO attendance(register_number, session_id, status, marked_at,
                                       is_override, override_comment, override_by)
                VALUES(%s,%s,'PRESENT',%s,1,%s,%s)
                ON DUPLICATE KEY UPDATE
                    status='PRESENT', is_override=1,
                    override_comment=VALUES(override_comment), override_by=VALUES(override_by)
                """,
                (register_number, int(session_id), now, comment, override_by),
            )
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE register_number=%s AND session_id=%s",
                (register_number, int(session_id)),
            )
            return _to_record(fetchone(cur))

    def list_for_student(self, register_number: str) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE register_number=%s ORDER BY marked_at",
                (register_number,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_students(self, register_numbers: Iterable[str]) -> Sequence[AttendanceRecord]:
        numbers = list(dict.fromkeys(register_numbers))
        if not numbers:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE register_number IN ({placeholders(len(numbers))})",
                tuple(numbers),
            )
            return [_to_record(r) for r in fetchall(cur)]
