"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ATTENDANCE_WINDOW_MINUTES = 10
DEFAULT_SWEEP_INTERVAL_SECONDS = 10

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

DEFAULT_MAX_LOGIN_ATTEMPTS = 5
DEFAULT_LOCK_MINUTES = 15
DEFAULT_JWT_EXPIRE_HOURS = 24
MIN_PASSWORD_LENGTH = 6

MAX_UPLOAD_BYTES = 5 * 1024 * 1024

ATTENDANCE_PHOTO_FOLDER = "attendance-photos"
ASSIGNMENT_FOLDER = "assignments"

YEARS_OF_STUDY = ("1", "2", "3", "4")
