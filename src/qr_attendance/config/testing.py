import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance_test"),
}

STORAGE_BACKEND = "memory"

CHECKIN_BASE_URL = "http://testserver"

QR_ROTATION_SECONDS = 60
LATE_THRESHOLD_MINUTES = 15
SESSION_LIFETIME_DAYS = 210
DAY_KEY_UTC_OFFSET_HOURS = 8

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
