import os

from .config import CACHE_TTLS, Config

SECRET_KEY = Config.SECRET_KEY
JWT_SECRET = Config.JWT_SECRET
JWT_EXPIRE_HOURS = Config.JWT_EXPIRE_HOURS

DB_CONFIG = Config.db_config()

ATTENDANCE_WINDOW_MINUTES = Config.ATTENDANCE_WINDOW_MINUTES
SWEEPER_ENABLED = Config.SWEEPER_ENABLED
SWEEP_INTERVAL_SECONDS = Config.SWEEP_INTERVAL_SECONDS
CRON_SECRET = Config.CRON_SECRET or "dev-cron-secret"

UPLOAD_FOLDER = Config.UPLOAD_FOLDER
UPLOAD_URL_PREFIX = Config.UPLOAD_URL_PREFIX
MAX_CONTENT_LENGTH = Config.MAX_CONTENT_LENGTH

MAX_LOGIN_ATTEMPTS = Config.MAX_LOGIN_ATTEMPTS
LOCK_MINUTES = Config.LOCK_MINUTES

ADMIN_REGISTER_NUMBER = Config.ADMIN_REGISTER_NUMBER
ADMIN_EMAIL = Config.ADMIN_EMAIL
ADMIN_PASSWORD = Config.ADMIN_PASSWORD or "admin123"

DEBUG = True
LOG_LEVEL = "DEBUG"

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
AUTO_SEED_DB = Config.AUTO_SEED_DB
