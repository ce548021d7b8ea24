# Tests inject an in-memory container; nothing here may require a database.
SECRET_KEY = "test-secret"
JWT_SECRET = "test-jwt-secret"
JWT_EXPIRE_HOURS = 1

DB_CONFIG = {
    "host": "localhost",
    "port": 3306,
    "user": "root",
    "password": "",
    "database": "workshop_attendance_test",
}

ATTENDANCE_WINDOW_MINUTES = 10
SWEEPER_ENABLED = False
CRON_SECRET = "test-cron-secret"

UPLOAD_FOLDER = "uploads-test"
MAX_CONTENT_LENGTH = 5 * 1024 * 1024

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False
AUTO_SEED_DB = False
