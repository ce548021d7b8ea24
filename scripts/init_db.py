"""Create the schema and the bootstrap admin; optionally load demo data.

    python scripts/init_db.py          # schema + admin (when ADMIN_PASSWORD is set)
    python scripts/init_db.py --seed   # ... plus demo students, days and sessions
"""
from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.workshop_attendance.workshop_attendance.database.bootstrap import (
    DEMO_STUDENTS,
    apply_schema,
    ensure_admin_user,
    list_tables,
    seed_demo_data,
)


def _target(db_config: dict) -> str:
    return f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--seed", action="store_true", help="also insert demo students, days and sessions")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    print(f"OK: schema.sql -> {_target(db_config)} (tables={len(list_tables(db_config))})")

    password = getattr(settings, "ADMIN_PASSWORD", "")
    if password:
        created = ensure_admin_user(
            db_config,
            register_number=settings.ADMIN_REGISTER_NUMBER,
            email=settings.ADMIN_EMAIL,
            password=password,
        )
        print("OK: admin created" if created else "OK: admin already present")
    else:
        print("SKIP: ADMIN_PASSWORD not set, no admin created")

    if args.seed:
        seed_demo_data(db_config)
        print(f"OK: demo data ({len(DEMO_STUDENTS)} students, password = date of birth)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
