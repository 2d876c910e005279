import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "classroom_test_db"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

ATTENDANCE_DEFAULT_DURATION = 10
ATTENDANCE_MIN_DURATION = 1
ATTENDANCE_MAX_DURATION = 1440

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
