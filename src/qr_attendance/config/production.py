import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance"),
}

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mysql")

CHECKIN_BASE_URL = os.getenv("CLIENT_URL", "http://localhost:3000")

QR_ROTATION_SECONDS = int(os.getenv("QR_EXPIRY_SECONDS", "60"))
LATE_THRESHOLD_MINUTES = int(os.getenv("LATE_THRESHOLD_MINUTES", "15"))
SESSION_LIFETIME_DAYS = int(os.getenv("SESSION_LIFETIME_DAYS", "210"))
DAY_KEY_UTC_OFFSET_HOURS = int(os.getenv("DAY_KEY_UTC_OFFSET_HOURS", "8"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
