from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import DayStatus
from ..core.exceptions import DuplicateRecordError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import Day
from .repository import DayRepository


def _to_day(row: dict) -> Day:
    return Day(
        day_id=int(row["day_id"]),
        day_number=int(row["day_number"]),
        title=row["title"],
        status=DayStatus(row["status"]),
        day_date=row.get("day_date"),
        updated_at=row.get("updated_at"),
    )


class MySQLDayRepository(DayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, day_id: int) -> Optional[Day]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT day_id, day_number, title, status, day_date, updated_at FROM days WHERE day_id=%s",
                (int(day_id),),
            )
            row = fetchone(cur)
            return _to_day(row) if row else None

    def list_all(self) -> Sequence[Day]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT day_id, day_number, title, status, day_date, updated_at FROM days ORDER BY day_number")
            return [_to_day(r) for r in fetchall(cur)]

    def create(self, *, day_number: int, title: str, day_date: Optional[date]) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO days(day_number, title, status, day_date) VALUES(%s,%s,'LOCKED',%s)",
                    (int(day_number), title, day_date),
                )
                return int(cur.lastrowid)
        except mysql.connector.errors.IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateRecordError(f"Day {day_number} already exists") from e
            raise

    def update_status(self, day_id: int, status: DayStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE days SET status=%s WHERE day_id=%s", (status.value, int(day_id)))
            # rowcount is 0 when the status was already set; existence is checked by the caller.
            return cur.rowcount > 0

    def latest_update(self) -> Optional[datetime]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT MAX(updated_at) AS latest FROM days")
            row = fetchone(cur)
            return row.get("latest") if row else None
