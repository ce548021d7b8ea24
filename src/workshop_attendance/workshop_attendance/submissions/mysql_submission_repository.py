from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional, Sequence

from ..core.enums import AssignmentType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, load_json, placeholders
from .model import Submission
from .repository import SubmissionRepository

_COLUMNS = """
    submission_id, register_number, session_id, assignment_title, assignment_type,
    response, files, submitted_at
"""


def _to_submission(row: dict) -> Submission:
    return Submission(
        submission_id=int(row["submission_id"]),
        register_number=row["register_number"],
        session_id=int(row["session_id"]),
        assignment_title=row["assignment_title"],
        assignment_type=AssignmentType(row["assignment_type"]),
        response=row.get("response"),
        files=tuple(load_json(row.get("files"), [])),
        submitted_at=row["submitted_at"],
    )


class MySQLSubmissionRepository(SubmissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert(
        self,
        *,
        register_number: str,
        session_id: int,
        assignment_title: str,
        assignment_type: AssignmentType,
        response: Optional[str],
        files: Sequence[str],
        submitted_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO assignment_submissions(register_number, session_id, assignment_title,
                                                   assignment_type, response, files, submitted_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    register_number,
                    int(session_id),
                    assignment_title,
                    assignment_type.value,
                    response,
                    dump_json(list(files)),
                    submitted_at,
                ),
            )
            return int(cur.lastrowid)

    def list_for_student(self, register_number: str, *, session_id: Optional[int] = None) -> Sequence[Submission]:
        sql = f"SELECT {_COLUMNS} FROM assignment_submissions WHERE register_number=%s"
        params: list[Any] = [register_number]
        if session_id is not None:
            sql += " AND session_id=%s"
            params.append(int(session_id))
        sql += " ORDER BY submitted_at, submission_id"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_submission(r) for r in fetchall(cur)]

    def list_for_students(self, register_numbers: Iterable[str]) -> Sequence[Submission]:
        numbers = list(dict.fromkeys(register_numbers))
        if not numbers:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM assignment_submissions "
                f"WHERE register_number IN ({placeholders(len(numbers))}) ORDER BY submitted_at, submission_id",
                tuple(numbers),
            )
            return [_to_submission(r) for r in fetchall(cur)]
