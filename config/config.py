import os


def _flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "workshop-dev-secret"
    JWT_SECRET = os.environ.get("JWT_SECRET") or SECRET_KEY
    JWT_EXPIRE_HOURS = int(os.environ.get("JWT_EXPIRE_HOURS", "24"))

    # DB
    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "workshop_attendance")
    # Many short-lived workers share one server: keep the pool small and fail fast.
    DB_POOL_SIZE = int(os.environ.get("DB_POOL_SIZE", "3"))
    DB_CONNECT_TIMEOUT = int(os.environ.get("DB_CONNECT_TIMEOUT", "5"))

    # Attendance windows
    ATTENDANCE_WINDOW_MINUTES = int(os.environ.get("ATTENDANCE_WINDOW_MINUTES", "10"))
    SWEEPER_ENABLED = _flag("SWEEPER_ENABLED", "1")
    SWEEP_INTERVAL_SECONDS = int(os.environ.get("SWEEP_INTERVAL_SECONDS", "10"))
    CRON_SECRET = os.environ.get("CRON_SECRET", "")

    # Uploads
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", "uploads")
    UPLOAD_URL_PREFIX = os.environ.get("UPLOAD_URL_PREFIX", "/uploads")
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", str(5 * 1024 * 1024)))

    # Login lockout
    MAX_LOGIN_ATTEMPTS = int(os.environ.get("MAX_LOGIN_ATTEMPTS", "5"))
    LOCK_MINUTES = int(os.environ.get("LOCK_MINUTES", "15"))

    # Created at startup when no admin exists
    ADMIN_REGISTER_NUMBER = os.environ.get("ADMIN_REGISTER_NUMBER", "ADMIN001")
    ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@workshop.local")
    ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "")

    # Dev helpers
    AUTO_INIT_DB = _flag("AUTO_INIT_DB")
    AUTO_SEED_DB = _flag("AUTO_SEED_DB")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    @classmethod
    def db_config(cls) -> dict:
        return {
            "host": cls.DB_HOST,
            "port": cls.DB_PORT,
            "user": cls.DB_USER,
            "password": cls.DB_PASSWORD,
            "database": cls.DB_NAME,
            "pool_size": cls.DB_POOL_SIZE,
            "connection_timeout": cls.DB_CONNECT_TIMEOUT,
        }


# Per-tag response cache TTLs in seconds
CACHE_TTLS = {
    "student-sessions": float(os.environ.get("CACHE_TTL_STUDENT_SESSIONS", "1")),
    "student-days": float(os.environ.get("CACHE_TTL_STUDENT_DAYS", "30")),
    "admin-days": float(os.environ.get("CACHE_TTL_ADMIN_DAYS", "30")),
    "admin-sessions": float(os.environ.get("CACHE_TTL_ADMIN_SESSIONS", "30")),
    "admin-progress": float(os.environ.get("CACHE_TTL_ADMIN_PROGRESS", "60")),
    "sync": float(os.environ.get("CACHE_TTL_SYNC", "5")),
}
