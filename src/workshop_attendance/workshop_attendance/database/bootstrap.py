from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from .mysql_base import dump_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "workshop_attendance")),
    )


@contextmanager
def _connection(db_config: dict, *, with_database: bool = True):
    target = _as_target(db_config)
    params = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        params["database"] = target.database
    conn = mysql.connector.connect(**params)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql usable regardless of the configured DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?m)^\s*--.*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Splits on ';' outside quoted strings.
    buf: list[str] = []
    quote = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    with _connection(db_config, with_database=False) as conn:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    with _connection(db_config) as conn:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)


def list_tables(db_config: dict) -> list[str]:
    with _connection(db_config) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]


def ensure_admin_user(db_config: dict, *, register_number: str, email: str, password: str, name: str = "System Administrator") -> bool:
    """Create the bootstrap admin when no admin exists. Returns True if one was created."""

    with _connection(db_config) as conn:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT user_id FROM users WHERE role='admin' LIMIT 1")
        if cur.fetchone():
            return False

        cur.execute(
            """
            INSERT INTO users(register_number, email, password_hash, name, role, department)
            VALUES(%s,%s,%s,%s,'admin','')
            """,
            (register_number.strip().upper(), email.strip().lower() or None, generate_password_hash(password), name),
        )
        logger.info("Admin user %s created", register_number)
        return True


DEMO_STUDENTS = [
    # (register number, name, date of birth used as initial password, year, department)
    ("9999999991", "Gopal", "02022002", "3", "CSE"),
    ("9924005056", "Gurru Ganesh S K", "07042007", "1", "CSE"),
    ("9924005376", "Gokul B", "25122006", "1", "CSE"),
    ("9924008091", "K. Surya Sai Teja", "14012007", "1", "CSE"),
]


def seed_demo_data(db_config: dict) -> None:
    """Demo students, one locked day and one open day with sessions."""

    with _connection(db_config) as conn:
        cur = conn.cursor(dictionary=True)

        for reg_no, name, dob, year, dept in DEMO_STUDENTS:
            cur.execute(
                """
                INSERT INTO users(register_number, password_hash, name, role, department, year_of_study)
                VALUES(%s,%s,%s,'student',%s,%s)
                ON DUPLICATE KEY UPDATE name=VALUES(name), department=VALUES(department),
                                        year_of_study=VALUES(year_of_study)
                """,
                (reg_no, generate_password_hash(dob), name, dept, year),
            )

        for day_number, title, status in ((1, "Day 1 - Foundations", "OPEN"), (2, "Day 2 - Project Work", "LOCKED")):
            cur.execute(
                """
                INSERT INTO days(day_number, title, status, day_date)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE title=VALUES(title)
                """,
                (day_number, title, status, date.today()),
            )
            cur.execute("SELECT day_id FROM days WHERE day_number=%s", (day_number,))
            day_id = int(cur.fetchone()["day_id"])

            cur.execute("SELECT COUNT(*) AS n FROM sessions WHERE day_id=%s", (day_id,))
            if int(cur.fetchone()["n"]) > 0:
                continue

            assignments = [
                {"title": "Reflection", "type": "text", "description": "What did you learn?"},
                {"title": "Screenshot", "type": "file", "description": "Upload your output"},
            ]
            for title in ("Morning Session", "Afternoon Session"):
                cur.execute(
                    """
                    INSERT INTO sessions(day_id, title, description, mode, session_type, assignments)
                    VALUES(%s,%s,%s,'OFFLINE','SESSION',%s)
                    """,
                    (day_id, title, f"{title} of day {day_number}", dump_json(assignments)),
                )
