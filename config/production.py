import os

from .config import CACHE_TTLS, Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
JWT_SECRET = os.getenv("JWT_SECRET", SECRET_KEY)
JWT_EXPIRE_HOURS = Config.JWT_EXPIRE_HOURS

DB_CONFIG = Config.db_config()

ATTENDANCE_WINDOW_MINUTES = Config.ATTENDANCE_WINDOW_MINUTES
# Serverless deployments set SWEEPER_ENABLED=0 and call /api/cron/close-expired instead.
SWEEPER_ENABLED = Config.SWEEPER_ENABLED
SWEEP_INTERVAL_SECONDS = Config.SWEEP_INTERVAL_SECONDS
CRON_SECRET = Config.CRON_SECRET

UPLOAD_FOLDER = Config.UPLOAD_FOLDER
UPLOAD_URL_PREFIX = Config.UPLOAD_URL_PREFIX
MAX_CONTENT_LENGTH = Config.MAX_CONTENT_LENGTH

MAX_LOGIN_ATTEMPTS = Config.MAX_LOGIN_ATTEMPTS
LOCK_MINUTES = Config.LOCK_MINUTES

ADMIN_REGISTER_NUMBER = Config.ADMIN_REGISTER_NUMBER
ADMIN_EMAIL = Config.ADMIN_EMAIL
ADMIN_PASSWORD = Config.ADMIN_PASSWORD

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = False
