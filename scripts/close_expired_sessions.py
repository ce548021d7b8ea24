"""Scheduled trigger: close every expired attendance window once and exit.

For deployments without the in-process sweeper (cron, serverless schedulers).
Prints the number of sessions transitioned.
"""
from __future__ import annotations

import importlib
import json
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.workshop_attendance.workshop_attendance.container import build_container


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(logging, str(getattr(settings, "LOG_LEVEL", "INFO")).upper(), logging.INFO))

    container = build_container(settings=settings)
    closed = container.closer.close_expired()
    print(json.dumps({"closed": closed}))
    return 0


if __name__ == "__main__":
    sys.exit(main())
