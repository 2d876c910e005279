import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "classroom_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Attendance polls: minutes a code stays redeemable when the caller gives no duration.
ATTENDANCE_DEFAULT_DURATION = os.getenv("ATTENDANCE_DEFAULT_DURATION", "10")
ATTENDANCE_MIN_DURATION = int(os.getenv("ATTENDANCE_MIN_DURATION", "1"))
ATTENDANCE_MAX_DURATION = int(os.getenv("ATTENDANCE_MAX_DURATION", "1440"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
