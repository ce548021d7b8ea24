from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import Role
from ..core.exceptions import DuplicateRecordError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import User
from .repository import UserRepository

_COLUMNS = """
    user_id, register_number, email, password_hash, name, role, department,
    year_of_study, login_attempts, lock_until, last_active
"""


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        register_number=row["register_number"],
        email=row.get("email"),
        password_hash=row["password_hash"],
        name=row["name"],
        role=Role(row["role"]),
        department=row.get("department") or "",
        year_of_study=row.get("year_of_study"),
        login_attempts=int(row.get("login_attempts") or 0),
        lock_until=row.get("lock_until"),
        last_active=row.get("last_active"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_register_number(self, register_number: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE register_number=%s", (register_number,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_login(self, register_number: str, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users WHERE register_number=%s OR email=%s LIMIT 1",
                (register_number, email),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(
        self,
        *,
        register_number: str,
        name: str,
        password_hash: str,
        role: Role,
        email: Optional[str] = None,
        department: str = "",
        year_of_study: Optional[str] = None,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users(register_number, email, password_hash, name, role, department, year_of_study)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (register_number, email, password_hash, name, role.value, department, year_of_study),
                )
                return int(cur.lastrowid)
        except mysql.connector.errors.IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateRecordError("User already exists") from e
            raise

    def record_failed_login(self, user_id: int, *, max_attempts: int, lock_until: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            # Single statement so concurrent failures cannot lose an increment.
            cur.execute(
                """
                UPDATE users
                SET login_attempts = login_attempts + 1,
                    lock_until = IF(login_attempts >= %s, %s, lock_until)
                WHERE user_id=%s
                """,
                (int(max_attempts), lock_until, int(user_id)),
            )
            cur.execute("SELECT login_attempts FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return int(row["login_attempts"]) if row else 0

    def record_successful_login(self, user_id: int, *, now: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET login_attempts=0, lock_until=NULL, last_active=%s WHERE user_id=%s",
                (now, int(user_id)),
            )

    def update_password_hash(self, user_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET password_hash=%s WHERE user_id=%s", (password_hash, int(user_id)))
            return cur.rowcount > 0

    def list_students_page(self, *, offset: int, limit: int, search: Optional[str] = None) -> tuple[Sequence[User], int]:
        clauses = ["role='student'"]
        params: list[object] = []
        if search:
            clauses.append("(LOWER(name) LIKE %s OR register_number LIKE %s)")
            like = f"%{search.strip()}%"
            params.extend([like.lower(), like.upper()])
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM users WHERE {where}", tuple(params))
            total = int(fetchone(cur)["total"])
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM users
                WHERE {where}
                ORDER BY register_number ASC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (int(limit), int(offset)),
            )
            return [_to_user(r) for r in fetchall(cur)], total
